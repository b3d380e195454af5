"""
Catalog Entity Models

Pydantic models mirroring the records exchanged with the admin REST backend:

Catalog:
- Attribute / AttributeValue: characteristic axes and their concrete values
- Category: parent/child tree with URL slugs
- Product / ProductVariant / ProductImage: purchasable variants keyed by
  attribute-value selections

Operations:
- Order / OrderItem: read and status updates only
- User: read only

The backend speaks camelCase JSON; every model accepts both the wire aliases
and snake_case field names.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base class for all wire models"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to a camelCase JSON body; only explicitly set fields are sent, so None clears"""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# =============================================================================
# ATTRIBUTES
# =============================================================================

class AttributeValue(CatalogModel):
    """One concrete value of an attribute, e.g. "Red" for Color"""
    id: int
    value: str
    attribute_id: int
    attribute: Optional["Attribute"] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Attribute(CatalogModel):
    """A characteristic axis, e.g. Color or Size"""
    id: int
    name: str
    values: List[AttributeValue] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


AttributeValue.model_rebuild()


class CreateAttributeInput(CatalogModel):
    name: str


class UpdateAttributeInput(CatalogModel):
    name: str


class CreateAttributeValueInput(CatalogModel):
    value: str
    attribute_id: int


class UpdateAttributeValueInput(CatalogModel):
    value: str


# =============================================================================
# CATEGORIES
# =============================================================================

class Category(CatalogModel):
    """
    Product category.

    Nesting is expressed both by ``parent_id`` and by the recursive
    ``children`` list. Some backend builds report the product count as
    ``_count.products``; it is folded into ``product_count``.
    """
    id: int
    name: str
    slug: str = ""
    parent_id: Optional[int] = None
    children: List["Category"] = Field(default_factory=list)
    product_count: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def fold_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and "productCount" not in data and "product_count" not in data:
            count = data.get("_count")
            if isinstance(count, dict) and "products" in count:
                data = {**data, "productCount": count["products"]}
        return data

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None


Category.model_rebuild()


class CreateCategoryInput(CatalogModel):
    name: str
    slug: str = ""
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None


class UpdateCategoryInput(CatalogModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductImage(CatalogModel):
    url: str
    alt_text: str = ""
    position: int = 0


class VariantAttribute(CatalogModel):
    """One attribute-value selection of a variant"""
    attribute_id: int
    value_id: int


class ProductVariant(CatalogModel):
    """A purchasable, SKU-bearing combination of attribute values"""
    id: int
    sku: str
    price: float
    stock: int
    product_id: Optional[int] = None
    attributes: List[VariantAttribute] = Field(default_factory=list)
    is_active: bool = True
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductCategory(CatalogModel):
    """Category summary nested in a product record"""
    id: int
    name: str
    slug: str = ""
    parent_id: Optional[int] = None


class Product(CatalogModel):
    id: int
    name: str
    slug: str = ""
    description: str = ""
    brand: Optional[str] = None
    is_active: bool = True
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    category_id: int
    category: Optional[ProductCategory] = None
    variants: List[ProductVariant] = Field(default_factory=list)
    images: List[ProductImage] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_variant(self, variant_id: int) -> Optional[ProductVariant]:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None


class VariantInput(CatalogModel):
    """Variant payload for create/update; ``id`` is set for existing variants"""
    id: Optional[int] = None
    sku: str
    price: float
    stock: int
    attributes: List[VariantAttribute] = Field(default_factory=list)
    is_active: Optional[bool] = None


class CreateProductInput(CatalogModel):
    name: str
    slug: str
    description: str
    category_id: int
    variants: List[VariantInput]
    images: List[ProductImage] = Field(default_factory=list)


class UpdateProductInput(CatalogModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    variants: Optional[List[VariantInput]] = None
    images: Optional[List[ProductImage]] = None
    is_active: Optional[bool] = None


# =============================================================================
# ORDERS
# =============================================================================

class OrderUser(CatalogModel):
    id: int
    email: str


class OrderProduct(CatalogModel):
    id: int
    name: str
    slug: str = ""


class OrderVariant(CatalogModel):
    """Variant snapshot referenced by an order item"""
    id: int
    sku: str
    price: Decimal
    stock: int = 0
    product_id: int
    product: Optional[OrderProduct] = None


class OrderItem(CatalogModel):
    id: int
    order_id: int
    variant_id: int
    quantity: int
    price: Decimal
    variant: Optional[OrderVariant] = None


class Order(CatalogModel):
    id: int
    user_id: int
    status: OrderStatus
    payment_method: str = ""
    total: Decimal
    user: Optional[OrderUser] = None
    items: List[OrderItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UpdateOrderStatusInput(CatalogModel):
    status: OrderStatus


# =============================================================================
# USERS & AUTH
# =============================================================================

class User(CatalogModel):
    id: int
    email: str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.email


class LoginResult(CatalogModel):
    token: str
    user: Optional[Dict[str, Any]] = None
