"""
Product Drafts

Staged local state of a product being created or edited. A draft keeps
every variant's SKU in step with the product name and the variant's
attribute selections, and keeps the product slug in step with the name
until either is edited by hand.

SKU override policy: a manually entered SKU sticks. Recomputation still
tracks the derived value, but only writes it into the SKU field for
variants whose SKU has not been overridden. ``reset_sku()`` hands a variant
back to the composer.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

import structlog

from catalog_admin.catalog.models import (
    CreateProductInput,
    Product,
    ProductImage,
    UpdateProductInput,
    VariantAttribute,
    VariantInput,
)
from catalog_admin.catalog.sku import (
    AttributeIndex,
    clear_attribute,
    expand_variants,
    select_attribute_value,
)
from catalog_admin.catalog.slugs import SlugTracker, generate_slug

logger = structlog.get_logger(__name__)


def normalize_image_positions(images: Sequence[ProductImage]) -> List[ProductImage]:
    """Reassign positions densely (0..n-1) in the current order"""
    return [image.model_copy(update={"position": i}) for i, image in enumerate(images)]


@dataclass
class VariantDraft:
    """One variant row of a product draft"""
    price: float = 0.0
    stock: int = 0
    attributes: List[VariantAttribute] = field(default_factory=list)
    sku: str = ""
    is_active: bool = True
    id: Optional[int] = None
    sku_overridden: bool = False
    computed_sku: str = ""

    def override_sku(self, sku: str) -> None:
        self.sku = sku
        self.sku_overridden = True

    def reset_sku(self) -> None:
        self.sku_overridden = False
        self.sku = self.computed_sku

    def apply_computed(self, computed: str) -> bool:
        """
        Record a freshly computed SKU.

        Returns True if the SKU field was written. Nothing is written when
        the computed value is unchanged or the SKU was overridden.
        """
        if computed == self.computed_sku:
            return False
        self.computed_sku = computed
        if self.sku_overridden:
            return False
        self.sku = computed
        return True

    def to_input(self) -> VariantInput:
        fields = dict(
            sku=self.sku,
            price=self.price,
            stock=self.stock,
            attributes=list(self.attributes),
            is_active=self.is_active,
        )
        if self.id is not None:
            fields["id"] = self.id
        return VariantInput(**fields)


class ProductDraft:
    """
    Editable product with derived slug and SKUs.

    Example:
        draft = ProductDraft(index)
        draft.set_name("Classic T-Shirt")
        draft.add_variant(price=19.99, stock=10)
        draft.select(0, size_attr.id, large.id)
        draft.select(0, color_attr.id, white.id)
        draft.variants[0].sku  # "CTSHRT-L-WHT"
    """

    def __init__(
        self,
        index: AttributeIndex,
        name: str = "",
        description: str = "",
        category_id: int = 0,
        product_id: Optional[int] = None,
        qualify_with_id: bool = False,
    ):
        self.index = index
        self.description = description
        self.category_id = category_id
        self.product_id = product_id
        self.qualify_with_id = qualify_with_id
        self.variants: List[VariantDraft] = []
        self.images: List[ProductImage] = []
        self._slug = SlugTracker()
        self._slug.set_name(name)

    @classmethod
    def from_product(
        cls,
        product: Product,
        index: AttributeIndex,
        qualify_with_id: bool = False,
    ) -> "ProductDraft":
        """Edit draft for a server record; SKUs that differ from the derived value count as overrides"""
        draft = cls(
            index,
            description=product.description,
            category_id=product.category_id,
            product_id=product.id,
            qualify_with_id=qualify_with_id,
        )
        draft._slug = SlugTracker(name=product.name, slug=product.slug or generate_slug(product.name))
        draft.images = sorted(product.images, key=lambda image: image.position)
        for variant in product.variants:
            if variant.is_deleted:
                continue
            computed = draft._compute_sku(variant.attributes)
            draft.variants.append(
                VariantDraft(
                    id=variant.id,
                    price=variant.price,
                    stock=variant.stock,
                    attributes=list(variant.attributes),
                    sku=variant.sku or computed,
                    is_active=variant.is_active,
                    computed_sku=computed,
                    sku_overridden=bool(variant.sku) and variant.sku != computed,
                )
            )
        return draft

    # -------------------------------------------------------------------------
    # Name / slug
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._slug.name

    @property
    def slug(self) -> str:
        return self._slug.slug

    def set_name(self, name: str) -> None:
        self._slug.set_name(name)
        self.sync_skus()

    def set_slug(self, slug: str) -> None:
        self._slug.set_slug(slug)

    # -------------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------------

    def add_variant(
        self,
        price: float = 0.0,
        stock: int = 0,
        attributes: Optional[Sequence[VariantAttribute]] = None,
        is_active: bool = True,
    ) -> VariantDraft:
        variant = VariantDraft(
            price=price,
            stock=stock,
            attributes=list(attributes or []),
            is_active=is_active,
        )
        self.variants.append(variant)
        variant.apply_computed(self._compute_sku(variant.attributes))
        return variant

    def remove_variant(self, position: int) -> VariantDraft:
        return self.variants.pop(position)

    def generate_variants(
        self,
        axes: Mapping[int, Sequence[int]],
        price: float = 0.0,
        stock: int = 0,
    ) -> List[VariantDraft]:
        """Append one variant per combination of the chosen attribute values"""
        created = [
            self.add_variant(price=price, stock=stock, attributes=combo)
            for combo in expand_variants(axes)
        ]
        logger.debug("Variants generated", count=len(created), product=self.name)
        return created

    def select(self, position: int, attribute_id: int, value_id: int) -> None:
        variant = self.variants[position]
        variant.attributes = select_attribute_value(variant.attributes, attribute_id, value_id)
        variant.apply_computed(self._compute_sku(variant.attributes))

    def deselect(self, position: int, attribute_id: int) -> None:
        variant = self.variants[position]
        variant.attributes = clear_attribute(variant.attributes, attribute_id)
        variant.apply_computed(self._compute_sku(variant.attributes))

    def _compute_sku(self, selections: Sequence[VariantAttribute]) -> str:
        product_id = self.product_id if self.qualify_with_id else None
        return self.index.sku_for(self.name, selections, product_id=product_id)

    def sync_skus(self) -> List[int]:
        """
        Recompute every variant's SKU.

        Returns:
            Positions of the variants whose SKU field was rewritten
        """
        changed = []
        for position, variant in enumerate(self.variants):
            if variant.apply_computed(self._compute_sku(variant.attributes)):
                changed.append(position)
        return changed

    def materialize(self, product_id: int) -> List[int]:
        """Regenerate SKUs once the backend has assigned the product id"""
        self.product_id = product_id
        return self.sync_skus()

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    def add_image(self, url: str, alt_text: str = "") -> None:
        self.images.append(ProductImage(url=url, alt_text=alt_text, position=len(self.images)))
        self.images = normalize_image_positions(self.images)

    def remove_image(self, position: int) -> None:
        del self.images[position]
        self.images = normalize_image_positions(self.images)

    # -------------------------------------------------------------------------
    # Payloads
    # -------------------------------------------------------------------------

    def to_create_input(self) -> CreateProductInput:
        return CreateProductInput(
            name=self.name,
            slug=self.slug,
            description=self.description,
            category_id=self.category_id,
            variants=[v.to_input() for v in self.variants],
            images=normalize_image_positions(self.images),
        )

    def to_update_input(self) -> UpdateProductInput:
        return UpdateProductInput(
            name=self.name,
            slug=self.slug,
            description=self.description,
            category_id=self.category_id,
            variants=[v.to_input() for v in self.variants],
            images=normalize_image_positions(self.images),
        )

    def to_variants_update(self) -> UpdateProductInput:
        return UpdateProductInput(variants=[v.to_input() for v in self.variants])
