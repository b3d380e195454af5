"""
Catalog Module
"""
from .models import (
    Attribute,
    AttributeValue,
    Category,
    Order,
    OrderStatus,
    Product,
    ProductVariant,
    User,
    VariantAttribute,
)
from .validators import CatalogValidationError, ValidationResult
from .slugs import generate_slug
from .sku import AttributeIndex, derive_sku
from .composer import ProductDraft

__all__ = [
    "Attribute",
    "AttributeValue",
    "Category",
    "Order",
    "OrderStatus",
    "Product",
    "ProductVariant",
    "User",
    "VariantAttribute",
    "CatalogValidationError",
    "ValidationResult",
    "generate_slug",
    "AttributeIndex",
    "derive_sku",
    "ProductDraft",
]
