"""
Catalog Stores

Stores for the editable catalog entities: attributes, attribute values,
categories and products. Local validation runs before any request.
"""

from typing import List, Optional

import structlog

from catalog_admin.catalog.composer import ProductDraft
from catalog_admin.catalog.models import (
    Attribute,
    AttributeValue,
    Category,
    CreateAttributeInput,
    CreateAttributeValueInput,
    CreateCategoryInput,
    CreateProductInput,
    Product,
    UpdateAttributeInput,
    UpdateAttributeValueInput,
    UpdateCategoryInput,
    UpdateProductInput,
)
from catalog_admin.catalog.slugs import generate_slug
from catalog_admin.catalog.validators import (
    validate_attribute_name,
    validate_attribute_value,
    validate_category,
    validate_product,
    validate_value_text,
)
from catalog_admin.gateway.resources import (
    AttributeGateway,
    AttributeValueGateway,
    CategoryGateway,
    ProductGateway,
)
from catalog_admin.store.base import EntityStore, StoreEvent

logger = structlog.get_logger(__name__)


# =============================================================================
# ATTRIBUTES
# =============================================================================

class AttributeStore(EntityStore[Attribute]):
    entity = "attribute"

    def __init__(self, gateway: AttributeGateway, reject_concurrent: Optional[bool] = None):
        super().__init__(gateway, reject_concurrent)

    def validate_create(self, payload: CreateAttributeInput) -> None:
        validate_attribute_name(payload.name).raise_for_errors()

    def validate_update(self, entity_id: int, payload: UpdateAttributeInput) -> None:
        validate_attribute_name(payload.name).raise_for_errors()


class AttributeValueStore(EntityStore[AttributeValue]):
    """
    Attribute values, optionally checked against a loaded AttributeStore.

    Deleting an attribute server-side removes its values; the cached values
    are dropped with ``discard_attribute`` once that delete is confirmed.
    """

    entity = "attribute value"

    def __init__(
        self,
        gateway: AttributeValueGateway,
        attributes: Optional[AttributeStore] = None,
        reject_concurrent: Optional[bool] = None,
    ):
        super().__init__(gateway, reject_concurrent)
        self.attributes = attributes

    def _known_attribute_ids(self) -> Optional[List[int]]:
        if self.attributes is None or not len(self.attributes):
            return None
        return [attribute.id for attribute in self.attributes]

    def validate_create(self, payload: CreateAttributeValueInput) -> None:
        validate_attribute_value(
            payload.value, payload.attribute_id, self._known_attribute_ids()
        ).raise_for_errors()

    def validate_update(self, entity_id: int, payload: UpdateAttributeValueInput) -> None:
        validate_value_text(payload.value).raise_for_errors()

    def values_for(self, attribute_id: int) -> List[AttributeValue]:
        return [value for value in self._items if value.attribute_id == attribute_id]

    async def fetch_for_attribute(self, attribute_id: int) -> List[AttributeValue]:
        """Fetch one attribute's values and merge them into the cache"""
        values = await self._call(
            "fetch", lambda: self.gateway.list_for_attribute(attribute_id)
        )
        others = [value for value in self._items if value.attribute_id != attribute_id]
        self._items = others + list(values)
        self._emit(StoreEvent.LOADED, self.items)
        return values

    def discard_attribute(self, attribute_id: int) -> int:
        """Drop cached values of a deleted attribute; returns how many were dropped"""
        before = len(self._items)
        self._items = [value for value in self._items if value.attribute_id != attribute_id]
        dropped = before - len(self._items)
        if dropped:
            logger.debug("Attribute values discarded", attribute_id=attribute_id, count=dropped)
            self._emit(StoreEvent.REMOVED, None)
        return dropped


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryStore(EntityStore[Category]):
    entity = "category"

    def __init__(self, gateway: CategoryGateway, reject_concurrent: Optional[bool] = None):
        super().__init__(gateway, reject_concurrent)

    async def create(self, payload: CreateCategoryInput) -> Category:
        if not payload.slug.strip():
            payload = payload.model_copy(update={"slug": generate_slug(payload.name)})
        return await super().create(payload)

    async def update(self, entity_id: int, payload: UpdateCategoryInput) -> Category:
        if payload.slug is not None and not payload.slug.strip() and payload.name:
            payload = payload.model_copy(update={"slug": generate_slug(payload.name)})
        return await super().update(entity_id, payload)

    def validate_create(self, payload: CreateCategoryInput) -> None:
        validate_category(
            payload.name,
            payload.slug,
            parent_id=payload.parent_id,
            categories=self._items or None,
        ).raise_for_errors()

    def validate_update(self, entity_id: int, payload: UpdateCategoryInput) -> None:
        # Fields absent from the patch keep their cached value
        current = self.get(entity_id)
        merged = current.model_dump() if current is not None else {}
        merged.update(payload.model_dump(exclude_unset=True))
        result = validate_category(
            merged.get("name"),
            merged.get("slug"),
            parent_id=merged.get("parent_id"),
            category_id=entity_id,
            categories=self._items or None,
        )
        if current is None:
            result.checks = [
                check for check in result.checks
                if check.field not in ("name", "slug") or check.field in payload.model_fields_set
            ]
        result.raise_for_errors()

    async def toggle_active(self, category_id: int) -> Category:
        return await self._toggle(
            category_id, "toggle", lambda: self.gateway.toggle_active(category_id)
        )

    def top_level(self) -> List[Category]:
        return [category for category in self._items if category.is_top_level]

    def children_of(self, category_id: int) -> List[Category]:
        return [category for category in self._items if category.parent_id == category_id]

    def requires_delete_confirmation(self, category_id: int) -> bool:
        category = self.get(category_id)
        return category is not None and category.product_count > 0

    async def remove(self, entity_id: int) -> None:
        if self.requires_delete_confirmation(entity_id):
            logger.warning(
                "Deleting category with products",
                category_id=entity_id,
                product_count=self.get(entity_id).product_count,
            )
        await super().remove(entity_id)


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductStore(EntityStore[Product]):
    entity = "product"

    def __init__(self, gateway: ProductGateway, reject_concurrent: Optional[bool] = None):
        super().__init__(gateway, reject_concurrent)

    def validate_create(self, payload: CreateProductInput) -> None:
        validate_product(payload).raise_for_errors()

    def validate_update(self, entity_id: int, payload: UpdateProductInput) -> None:
        validate_product(payload).raise_for_errors()

    async def patch(self, product_id: int, payload: UpdateProductInput) -> Product:
        """Update only the fields present in the payload"""
        validate_product(payload, partial=True).raise_for_errors()
        record = await self._call(
            "update", lambda: self.gateway.update(product_id, payload), product_id
        )
        self._replace(record)
        logger.info("Product updated", entity_id=product_id, fields=sorted(payload.model_fields_set))
        return record

    async def create_from_draft(self, draft: ProductDraft) -> Product:
        """
        Create a product from a draft, then materialize its SKUs.

        The backend assigns the product and variant ids on create. Variant ids
        are copied back into the draft by position, SKUs are regenerated with
        the new product id, and the variants are sent in a second update.

        Raises:
            CatalogValidationError: The draft fails local validation
            GatewayError: Either remote call failed; after a failed second
                update the created product stays in the cache
        """
        created = await self.create(draft.to_create_input())

        live = [variant for variant in created.variants if not variant.is_deleted]
        for variant_draft, variant in zip(draft.variants, live):
            variant_draft.id = variant.id
        draft.materialize(created.id)

        record = await self._call(
            "update", lambda: self.gateway.update(created.id, draft.to_variants_update()), created.id
        )
        self._replace(record)
        logger.info("Product SKUs materialized", entity_id=created.id, variants=len(draft.variants))
        return record

    async def toggle_active(self, product_id: int) -> Product:
        return await self._toggle(
            product_id, "toggle", lambda: self.gateway.toggle_active(product_id)
        )

    async def toggle_variant_active(self, product_id: int, variant_id: int) -> Product:
        """Variant writes are tracked per variant, keyed by (product_id, variant_id)"""
        return await self._toggle(
            (product_id, variant_id),
            "toggle_variant",
            lambda: self.gateway.toggle_variant_active(product_id, variant_id),
        )

    async def delete_variant(self, product_id: int, variant_id: int) -> Optional[Product]:
        await self._call(
            "delete_variant",
            lambda: self.gateway.delete_variant(product_id, variant_id),
            (product_id, variant_id),
        )
        product = self.get(product_id)
        if product is None:
            return None
        remaining = [variant for variant in product.variants if variant.id != variant_id]
        updated = product.model_copy(update={"variants": remaining})
        self._replace(updated)
        return updated

    def search(self, query: str = "", category_id: Optional[int] = None) -> List[Product]:
        """Filter cached products by name/slug/SKU substring and category"""
        needle = query.strip().lower()
        results = []
        for product in self._items:
            if category_id is not None and product.category_id != category_id:
                continue
            if needle:
                haystack = [product.name.lower(), product.slug.lower()]
                haystack.extend(variant.sku.lower() for variant in product.variants)
                if not any(needle in text for text in haystack):
                    continue
            results.append(product)
        return results
