"""
Catalog Seeder

Populates an empty backend with demo catalog data through the regular
stores, so every record passes local validation and every SKU is derived
by the variant composer:
- Size and Color attributes with their values
- A parent/child category pair
- Products whose variants cover every size/color combination
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import structlog
from faker import Faker

from catalog_admin.catalog.composer import ProductDraft
from catalog_admin.catalog.models import (
    Attribute,
    AttributeValue,
    Category,
    CreateAttributeInput,
    CreateAttributeValueInput,
    CreateCategoryInput,
    Product,
)
from catalog_admin.catalog.sku import AttributeIndex, name_root
from catalog_admin.catalog.slugs import generate_slug
from catalog_admin.store import AttributeStore, AttributeValueStore, CategoryStore, ProductStore

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

SIZE_VALUES = ["S", "M", "L", "XL"]
COLOR_VALUES = ["Black", "White", "Red", "Blue"]

CATEGORY_TREE = ("Apparel", "Tops")

ADJECTIVES = [
    "Classic", "Essential", "Vintage", "Everyday", "Premium",
    "Relaxed", "Heritage", "Urban", "Coastal", "Alpine",
]
PRODUCT_TYPES = [
    "T-Shirt", "Hoodie", "Polo Shirt", "Sweatshirt",
    "Tank Top", "Henley", "Jersey", "Crewneck",
]


@dataclass
class SeedReport:
    """Records created (or reused) by a seeding run"""
    attributes: List[Attribute] = field(default_factory=list)
    values: List[AttributeValue] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)

    @property
    def variant_count(self) -> int:
        return sum(len(product.variants) for product in self.products)


class CatalogSeeder:
    """
    Seed demo catalog data through the stores.

    Existing attributes, values and categories with the same names are
    reused, so seeding twice only adds products.

    Example:
        seeder = CatalogSeeder(console.attributes, console.values,
                               console.categories, console.products)
        report = await seeder.seed(product_count=5)
    """

    def __init__(
        self,
        attributes: AttributeStore,
        values: AttributeValueStore,
        categories: CategoryStore,
        products: ProductStore,
        seed: int = 42,
        qualify_with_id: bool = False,
    ):
        self.attributes = attributes
        self.values = values
        self.categories = categories
        self.products = products
        self.qualify_with_id = qualify_with_id
        self.fake = Faker()
        self.fake.seed_instance(seed)

    async def seed(self, product_count: int = 5) -> SeedReport:
        report = SeedReport()

        size, sizes = await self._ensure_attribute("Size", SIZE_VALUES)
        color, colors = await self._ensure_attribute("Color", COLOR_VALUES)
        report.attributes.extend([size, color])
        report.values.extend(sizes + colors)

        parent = await self._ensure_category(CATEGORY_TREE[0])
        child = await self._ensure_category(CATEGORY_TREE[1], parent_id=parent.id)
        report.categories.extend([parent, child])

        index = AttributeIndex(self.attributes.items, self.values.items)
        axes = {size.id: [v.id for v in sizes], color.id: [v.id for v in colors]}

        for name in self._product_names(product_count):
            draft = ProductDraft(index, qualify_with_id=self.qualify_with_id)
            draft.set_name(name)
            draft.description = self.fake.sentence(nb_words=14)
            draft.category_id = child.id
            draft.generate_variants(
                axes,
                price=round(self.fake.pyfloat(min_value=9, max_value=120), 2),
                stock=self.fake.random_int(min=0, max=50),
            )
            draft.add_image(self.fake.image_url(), alt_text=name)
            report.products.append(await self.products.create_from_draft(draft))

        logger.info(
            "Catalog seeded",
            attributes=len(report.attributes),
            values=len(report.values),
            categories=len(report.categories),
            products=len(report.products),
            variants=report.variant_count,
        )
        return report

    def _product_names(self, count: int) -> List[str]:
        """Pick unused names whose SKU roots differ from every existing product"""
        names = [f"{adjective} {kind}" for adjective in ADJECTIVES for kind in PRODUCT_TYPES]
        used_roots = {name_root(product.name) for product in self.products}
        candidates = [name for name in names if name_root(name) not in used_roots]
        if not candidates:
            return []

        picked = []
        for name in self.fake.random_sample(elements=candidates, length=len(candidates)):
            root = name_root(name)
            if root in used_roots:
                continue
            used_roots.add(root)
            picked.append(name)
            if len(picked) == count:
                break
        if len(picked) < count:
            logger.warning("Ran out of distinct product names", requested=count, available=len(picked))
        return picked

    async def _ensure_attribute(
        self,
        name: str,
        values: Sequence[str],
    ) -> Tuple[Attribute, List[AttributeValue]]:
        attribute = self._find_attribute(name)
        if attribute is None:
            attribute = await self.attributes.create(CreateAttributeInput(name=name))

        known = {v.value.lower(): v for v in self.values.values_for(attribute.id)}
        created = []
        for value in values:
            record = known.get(value.lower())
            if record is None:
                record = await self.values.create(
                    CreateAttributeValueInput(value=value, attribute_id=attribute.id)
                )
            created.append(record)
        return attribute, created

    def _find_attribute(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name.strip().lower() == name.lower():
                return attribute
        return None

    async def _ensure_category(self, name: str, parent_id: Optional[int] = None) -> Category:
        slug = generate_slug(name)
        for category in self.categories:
            if category.slug == slug:
                return category
        return await self.categories.create(
            CreateCategoryInput(name=name, slug=slug, parent_id=parent_id)
        )
