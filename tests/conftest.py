"""
Test Suite Configuration
"""
import httpx
import pytest

from fake_backend import ADMIN_TOKEN, create_backend

from catalog_admin.catalog.models import (
    Attribute,
    AttributeValue,
    Category,
    Order,
    Product,
)
from catalog_admin.catalog.sku import AttributeIndex
from catalog_admin.config import get_settings
from catalog_admin.gateway import CredentialStore
from catalog_admin.main import AdminConsole


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Isolated settings: credentials under tmp_path, no .env leakage"""
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("ADMIN_API_BASE_URL", "http://test")
    monkeypatch.setenv("ADMIN_AUTH_CREDENTIALS_PATH", str(tmp_path / "credentials.json"))
    monkeypatch.delenv("CATALOG_REJECT_CONCURRENT_MUTATIONS", raising=False)
    monkeypatch.delenv("CATALOG_SKU_QUALIFY_WITH_ID", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def credentials(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "credentials.json")


@pytest.fixture
def backend():
    """Fresh in-memory backend app"""
    return create_backend()


@pytest.fixture
def admin_credentials(credentials) -> CredentialStore:
    credentials.save(ADMIN_TOKEN, {"id": 1, "email": "admin@example.com"})
    return credentials


@pytest.fixture
def make_console(backend, admin_credentials):
    """Factory for consoles talking to the in-memory backend"""
    def factory(**kwargs) -> AdminConsole:
        return AdminConsole(
            base_url="http://test",
            credentials=admin_credentials,
            transport=httpx.ASGITransport(app=backend),
            **kwargs,
        )
    return factory


@pytest.fixture
def size_attribute() -> Attribute:
    return Attribute(
        id=1,
        name="Size",
        values=[
            AttributeValue(id=11, value="S", attribute_id=1),
            AttributeValue(id=12, value="M", attribute_id=1),
            AttributeValue(id=13, value="L", attribute_id=1),
            AttributeValue(id=14, value="XL", attribute_id=1),
        ],
    )


@pytest.fixture
def color_attribute() -> Attribute:
    return Attribute(
        id=2,
        name="Color",
        values=[
            AttributeValue(id=21, value="Black", attribute_id=2),
            AttributeValue(id=22, value="White", attribute_id=2),
            AttributeValue(id=23, value="Red", attribute_id=2),
        ],
    )


@pytest.fixture
def attribute_index(size_attribute, color_attribute) -> AttributeIndex:
    return AttributeIndex([size_attribute, color_attribute])


@pytest.fixture
def sample_categories() -> list:
    return [
        Category(id=1, name="Apparel", slug="apparel", product_count=3),
        Category(id=2, name="Tops", slug="tops", parent_id=1, product_count=2),
        Category(id=3, name="Shoes", slug="shoes"),
    ]


@pytest.fixture
def sample_products() -> list:
    """Create sample products for testing"""
    return [
        Product.model_validate({
            "id": 1,
            "name": "Classic T-Shirt",
            "slug": "classic-t-shirt",
            "description": "Cotton tee",
            "categoryId": 2,
            "isActive": True,
            "variants": [
                {"id": 101, "sku": "CTSHRT-M-BLK", "price": 19.99, "stock": 4, "productId": 1,
                 "attributes": [{"attributeId": 1, "valueId": 12}, {"attributeId": 2, "valueId": 21}]},
                {"id": 102, "sku": "CTSHRT-L-WHT", "price": 19.99, "stock": 25, "productId": 1,
                 "attributes": [{"attributeId": 1, "valueId": 13}, {"attributeId": 2, "valueId": 22}]},
            ],
        }),
        Product.model_validate({
            "id": 2,
            "name": "Urban Hoodie",
            "slug": "urban-hoodie",
            "description": "Fleece hoodie",
            "categoryId": 2,
            "isActive": False,
            "variants": [
                {"id": 201, "sku": "UHD-S-RED", "price": 49.5, "stock": 0, "productId": 2,
                 "attributes": [{"attributeId": 1, "valueId": 11}, {"attributeId": 2, "valueId": 23}]},
                {"id": 202, "sku": "UHD-XL-RED", "price": 49.5, "stock": 2, "productId": 2,
                 "isActive": False, "attributes": []},
            ],
        }),
    ]


@pytest.fixture
def sample_orders() -> list:
    """Create sample orders for testing"""
    return [
        Order.model_validate({
            "id": 1001, "userId": 7, "status": "PAID", "paymentMethod": "card", "total": "39.98",
            "user": {"id": 7, "email": "jane@example.com"},
            "items": [{"id": 1, "orderId": 1001, "variantId": 101, "quantity": 2, "price": "19.99"}],
        }),
        Order.model_validate({
            "id": 1002, "userId": 7, "status": "DELIVERED", "total": "49.50",
            "user": {"id": 7, "email": "jane@example.com"},
            "items": [{"id": 2, "orderId": 1002, "variantId": 201, "quantity": 1, "price": "49.50"}],
        }),
        Order.model_validate({
            "id": 1003, "userId": 9, "status": "CANCELLED", "total": "100.00",
            "user": {"id": 9, "email": "bob@example.com"},
            "items": [],
        }),
    ]
