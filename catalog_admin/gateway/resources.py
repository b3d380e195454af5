"""
Resource Gateways

One gateway per entity type over the uniform REST contract:

    GET    /{resource}
    GET    /{resource}/{id}
    POST   /{resource}
    PATCH  /{resource}/{id}
    DELETE /{resource}/{id}

plus the resource-specific extensions (active toggles, variant removal,
order status and receipts, admin login).
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

import structlog

from catalog_admin.catalog.models import (
    Attribute,
    AttributeValue,
    CatalogModel,
    Category,
    LoginResult,
    Order,
    OrderStatus,
    Product,
    UpdateOrderStatusInput,
    User,
)
from catalog_admin.config import get_settings
from catalog_admin.gateway.client import ApiClient

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=CatalogModel)


class ReadOnlyGateway(Generic[ModelT]):
    """List and fetch records of one resource"""

    resource: str = ""
    model: Type[ModelT]
    label: str = "record"
    plural: str = "records"

    def __init__(self, client: ApiClient):
        self.client = client

    def _path(self, *parts: Any) -> str:
        return "/" + "/".join([self.resource, *(str(p) for p in parts)])

    def _parse(self, data: Any) -> ModelT:
        return self.model.model_validate(data)

    def _parse_many(self, data: Any) -> List[ModelT]:
        if not data:
            return []
        return [self._parse(item) for item in data]

    async def list(self) -> List[ModelT]:
        data = await self.client.request("GET", self._path(), action=f"fetch {self.plural}")
        return self._parse_many(data)

    async def get(self, entity_id: int) -> ModelT:
        data = await self.client.request("GET", self._path(entity_id), action=f"fetch {self.label}")
        return self._parse(data)


class ResourceGateway(ReadOnlyGateway[ModelT]):
    """Full CRUD over one resource"""

    async def create(self, payload: CatalogModel) -> ModelT:
        data = await self.client.request(
            "POST", self._path(), action=f"create {self.label}", json=payload.to_payload()
        )
        return self._parse(data)

    async def update(self, entity_id: int, payload: CatalogModel) -> ModelT:
        data = await self.client.request(
            "PATCH", self._path(entity_id), action=f"update {self.label}", json=payload.to_payload()
        )
        return self._parse(data)

    async def delete(self, entity_id: int) -> None:
        await self.client.request("DELETE", self._path(entity_id), action=f"delete {self.label}")


class AttributeGateway(ResourceGateway[Attribute]):
    resource = "attributes"
    model = Attribute
    label = "attribute"
    plural = "attributes"


class AttributeValueGateway(ResourceGateway[AttributeValue]):
    resource = "attribute-values"
    model = AttributeValue
    label = "attribute value"
    plural = "attribute values"

    async def list_for_attribute(self, attribute_id: int) -> List[AttributeValue]:
        data = await self.client.request(
            "GET", f"/attributes/{attribute_id}/values", action="fetch attribute values"
        )
        return self._parse_many(data)


class CategoryGateway(ResourceGateway[Category]):
    resource = "categories"
    model = Category
    label = "category"
    plural = "categories"

    async def toggle_active(self, category_id: int) -> Category:
        data = await self.client.request(
            "PATCH", self._path(category_id, "toggle-active"), action="toggle category status"
        )
        return self._parse(data)


class ProductGateway(ResourceGateway[Product]):
    resource = "products"
    model = Product
    label = "product"
    plural = "products"

    async def toggle_active(self, product_id: int) -> Product:
        data = await self.client.request(
            "PATCH", self._path(product_id, "toggle-active"), action="toggle product status"
        )
        return self._parse(data)

    async def toggle_variant_active(self, product_id: int, variant_id: int) -> Product:
        data = await self.client.request(
            "PATCH",
            self._path(product_id, "variants", variant_id, "toggle-active"),
            action="toggle variant status",
        )
        return self._parse(data)

    async def delete_variant(self, product_id: int, variant_id: int) -> None:
        await self.client.request(
            "DELETE", self._path(product_id, "variants", variant_id), action="delete variant"
        )


class OrderGateway(ReadOnlyGateway[Order]):
    resource = "orders"
    model = Order
    label = "order"
    plural = "orders"

    async def update_status(self, order_id: int, status: OrderStatus) -> Order:
        payload = UpdateOrderStatusInput(status=status)
        data = await self.client.request(
            "PATCH", self._path(order_id, "status"), action="update order status", json=payload.to_payload()
        )
        return self._parse(data)

    async def download_receipt(self, order_id: int) -> bytes:
        return await self.client.request_bytes(
            "GET", self._path(order_id, "receipt"), action="download receipt"
        )


class UserGateway(ReadOnlyGateway[User]):
    resource = "users"
    model = User
    label = "user"
    plural = "users"


class AuthGateway:
    """Admin login/logout; the token is persisted in the client's credential store"""

    def __init__(self, client: ApiClient):
        self.client = client
        self._settings = get_settings().api

    async def login(self, email: str, password: str) -> LoginResult:
        data = await self.client.request(
            "POST",
            self._settings.login_path,
            action="log in",
            json={"email": email, "password": password},
        )
        result = LoginResult.model_validate(data)
        self.client.credentials.save(result.token, result.user)
        logger.info("Admin logged in", email=email)
        return result

    async def logout(self) -> None:
        try:
            await self.client.request("POST", self._settings.logout_path, action="log out")
        finally:
            self.client.credentials.clear()
        logger.info("Admin logged out")

    @property
    def current_user(self) -> Optional[dict]:
        return self.client.credentials.user
