"""
Catalog Validation Module

Pure pre-flight checks run before any create/update call reaches the
backend. Each predicate returns a ValidationResult made of field-scoped
checks; ``raise_for_errors()`` turns a failed result into a
CatalogValidationError carrying the field-level messages.

Checks:
- Attribute and attribute value names
- Category names, slugs and parent references (no cycles)
- Product name/description length bounds
- Variant price, stock, SKU and attribute axes
- Product variants and category reference
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Dict, Iterable, List, Optional, Union

import structlog

from catalog_admin.catalog.models import (
    Category,
    CreateProductInput,
    UpdateProductInput,
    VariantInput,
)
from catalog_admin.config import get_settings

logger = structlog.get_logger(__name__)


class ValidationCode(str, Enum):
    """Reasons a catalog payload can be rejected locally"""
    EMPTY_NAME = "empty_name"
    NAME_TOO_LONG = "name_too_long"
    EMPTY_DESCRIPTION = "empty_description"
    DESCRIPTION_TOO_LONG = "description_too_long"
    EMPTY_VALUE = "empty_value"
    EMPTY_SLUG = "empty_slug"
    INVALID_ATTRIBUTE = "invalid_attribute"
    INVALID_PARENT = "invalid_parent"
    INVALID_PRICE = "invalid_price"
    INVALID_STOCK = "invalid_stock"
    MISSING_SKU = "missing_sku"
    DUPLICATE_ATTRIBUTE = "duplicate_attribute"
    NO_VARIANTS = "no_variants"
    INVALID_CATEGORY = "invalid_category"


@dataclass
class ValidationCheck:
    """Single failed check"""
    field: str
    code: ValidationCode
    message: str


@dataclass
class ValidationResult:
    """Outcome of a validation predicate"""
    checks: List[ValidationCheck] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.checks

    @property
    def errors(self) -> Dict[str, str]:
        """First message per field"""
        out: Dict[str, str] = {}
        for check in self.checks:
            out.setdefault(check.field, check.message)
        return out

    @property
    def codes(self) -> List[ValidationCode]:
        return [check.code for check in self.checks]

    def add(self, field_name: str, code: ValidationCode, message: str) -> "ValidationResult":
        self.checks.append(ValidationCheck(field=field_name, code=code, message=message))
        return self

    def merge(self, other: "ValidationResult", prefix: str = "") -> "ValidationResult":
        for check in other.checks:
            name = f"{prefix}.{check.field}" if prefix else check.field
            self.checks.append(ValidationCheck(field=name, code=check.code, message=check.message))
        return self

    def raise_for_errors(self) -> None:
        if self.checks:
            raise CatalogValidationError(self)


class CatalogValidationError(ValueError):
    """Local, field-scoped rejection; never reaches the network"""

    def __init__(self, result: ValidationResult):
        self.result = result
        summary = "; ".join(f"{c.field}: {c.message}" for c in result.checks)
        super().__init__(summary or "Validation failed")

    @property
    def errors(self) -> Dict[str, str]:
        return self.result.errors


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value) and not math.isinf(value)


# =============================================================================
# ATTRIBUTES
# =============================================================================

def validate_attribute_name(name: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if _is_blank(name):
        result.add("name", ValidationCode.EMPTY_NAME, "Attribute name is required")
    return result


def validate_value_text(value: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if _is_blank(value):
        result.add("value", ValidationCode.EMPTY_VALUE, "Value is required")
    return result


def validate_attribute_value(
    value: Optional[str],
    attribute_id: Optional[int],
    known_attribute_ids: Optional[Collection[int]] = None,
) -> ValidationResult:
    """Check an attribute value and, when the known ids are given, its parent"""
    result = validate_value_text(value)
    if not isinstance(attribute_id, int) or isinstance(attribute_id, bool) or attribute_id <= 0:
        result.add("attributeId", ValidationCode.INVALID_ATTRIBUTE, "Attribute is required")
    elif known_attribute_ids is not None and attribute_id not in known_attribute_ids:
        result.add(
            "attributeId",
            ValidationCode.INVALID_ATTRIBUTE,
            f"Attribute {attribute_id} does not exist",
        )
    return result


# =============================================================================
# CATEGORIES
# =============================================================================

def validate_category(
    name: Optional[str],
    slug: Optional[str],
    parent_id: Optional[int] = None,
    category_id: Optional[int] = None,
    categories: Optional[Iterable[Category]] = None,
) -> ValidationResult:
    """
    Check a category create/update.

    Args:
        name: Display name
        slug: URL slug (already auto-filled from the name if blank)
        parent_id: Proposed parent, or None for a top-level category
        category_id: Id of the category being updated, None on create
        categories: Known categories for parent/cycle checks
    """
    result = ValidationResult()
    if _is_blank(name):
        result.add("name", ValidationCode.EMPTY_NAME, "Category name is required")
    if _is_blank(slug):
        result.add("slug", ValidationCode.EMPTY_SLUG, "Category slug is required")

    if parent_id is None:
        return result
    if category_id is not None and parent_id == category_id:
        result.add("parentId", ValidationCode.INVALID_PARENT, "A category cannot be its own parent")
        return result
    if categories is None:
        return result

    parents = {c.id: c.parent_id for c in categories}
    if parent_id not in parents:
        result.add("parentId", ValidationCode.INVALID_PARENT, f"Parent category {parent_id} does not exist")
        return result

    # Walk up from the proposed parent; reaching the category itself is a cycle
    seen = set()
    cursor: Optional[int] = parent_id
    while cursor is not None and cursor not in seen:
        if category_id is not None and cursor == category_id:
            result.add("parentId", ValidationCode.INVALID_PARENT, "Category nesting cannot form a cycle")
            break
        seen.add(cursor)
        cursor = parents.get(cursor)
    return result


# =============================================================================
# PRODUCTS
# =============================================================================

def validate_product_name(name: Optional[str]) -> ValidationResult:
    limit = get_settings().catalog.name_max_length
    result = ValidationResult()
    if _is_blank(name):
        result.add("name", ValidationCode.EMPTY_NAME, "Product name is required")
    elif len(name) > limit:
        result.add("name", ValidationCode.NAME_TOO_LONG, f"Name must be at most {limit} characters")
    return result


def validate_product_description(description: Optional[str]) -> ValidationResult:
    limit = get_settings().catalog.description_max_length
    result = ValidationResult()
    if _is_blank(description):
        result.add("description", ValidationCode.EMPTY_DESCRIPTION, "Description is required")
    elif len(description) > limit:
        result.add(
            "description",
            ValidationCode.DESCRIPTION_TOO_LONG,
            f"Description must be at most {limit} characters",
        )
    return result


def validate_variant(variant: VariantInput) -> ValidationResult:
    result = ValidationResult()
    if not _is_number(variant.price) or variant.price < 0:
        result.add("price", ValidationCode.INVALID_PRICE, "Price must be a non-negative number")
    if not _is_number(variant.stock) or variant.stock < 0:
        result.add("stock", ValidationCode.INVALID_STOCK, "Stock must be a non-negative number")
    if _is_blank(variant.sku):
        result.add("sku", ValidationCode.MISSING_SKU, "SKU is required")

    attribute_ids = [a.attribute_id for a in variant.attributes]
    if len(attribute_ids) != len(set(attribute_ids)):
        result.add(
            "attributes",
            ValidationCode.DUPLICATE_ATTRIBUTE,
            "A variant can hold only one value per attribute",
        )
    return result


def validate_product(
    product: Union[CreateProductInput, UpdateProductInput],
    partial: bool = False,
) -> ValidationResult:
    """
    Check a product payload.

    With ``partial`` only the fields present in the payload are checked, as
    for a PATCH. A present variants list must still be non-empty.
    """
    result = ValidationResult()

    present = product.model_fields_set
    if not partial or "name" in present:
        result.merge(validate_product_name(product.name))
    if not partial or "description" in present:
        result.merge(validate_product_description(product.description))

    if not partial or "category_id" in present:
        category_id = product.category_id
        if not isinstance(category_id, int) or isinstance(category_id, bool) or category_id <= 0:
            result.add("categoryId", ValidationCode.INVALID_CATEGORY, "Category is required")

    if not partial or "variants" in present:
        variants = product.variants or []
        if not variants:
            result.add("variants", ValidationCode.NO_VARIANTS, "At least one variant is required")
        for i, variant in enumerate(variants):
            result.merge(validate_variant(variant), prefix=f"variants.{i}")

    if not result.ok:
        logger.debug("Product payload rejected", errors=result.errors)
    return result
