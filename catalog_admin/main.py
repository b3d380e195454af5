"""
Catalog Admin Console

Composition root: one API client, one gateway per resource and one store
per entity type, sharing the persisted admin credentials.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

import httpx
import structlog

from catalog_admin.catalog.composer import ProductDraft
from catalog_admin.catalog.models import LoginResult
from catalog_admin.catalog.sku import AttributeIndex
from catalog_admin.config import get_settings
from catalog_admin.gateway import (
    ApiClient,
    AttributeGateway,
    AttributeValueGateway,
    AuthGateway,
    CategoryGateway,
    CredentialStore,
    OrderGateway,
    ProductGateway,
    UserGateway,
)
from catalog_admin.reporting import DashboardSummary, dashboard_summary
from catalog_admin.store import (
    AttributeStore,
    AttributeValueStore,
    CategoryStore,
    OrderStore,
    ProductStore,
    StoreEvent,
    UserStore,
)

logger = structlog.get_logger(__name__)


class AdminConsole:
    """
    Everything an admin session needs, wired together.

    Example:
        async with AdminConsole() as console:
            await console.login("admin@example.com", "secret")
            await console.refresh_all()
            draft = console.new_product_draft()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        credentials: Optional[CredentialStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        reject_concurrent: Optional[bool] = None,
    ):
        self.settings = get_settings()
        self.client = ApiClient(
            base_url=base_url,
            credentials=credentials,
            transport=transport,
            on_unauthorized=on_unauthorized or self._session_expired,
        )

        self.auth = AuthGateway(self.client)
        self.attributes = AttributeStore(AttributeGateway(self.client), reject_concurrent)
        self.values = AttributeValueStore(
            AttributeValueGateway(self.client), self.attributes, reject_concurrent
        )
        self.categories = CategoryStore(CategoryGateway(self.client), reject_concurrent)
        self.products = ProductStore(ProductGateway(self.client), reject_concurrent)
        self.orders = OrderStore(OrderGateway(self.client), reject_concurrent)
        self.users = UserStore(UserGateway(self.client))

        self.attributes.subscribe(self._on_attribute_change)

    async def __aenter__(self) -> "AdminConsole":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    def _session_expired(self) -> None:
        logger.warning("Admin session expired; log in again")

    def _on_attribute_change(self, event: StoreEvent, payload: Any) -> None:
        # The backend deletes an attribute's values along with it
        if event is StoreEvent.REMOVED:
            self.values.discard_attribute(payload)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.client.credentials.is_authenticated

    async def login(self, email: str, password: str) -> LoginResult:
        return await self.auth.login(email, password)

    async def logout(self) -> None:
        await self.auth.logout()

    # -------------------------------------------------------------------------
    # Stores
    # -------------------------------------------------------------------------

    async def refresh_all(self) -> Dict[str, Optional[str]]:
        """
        Load every store concurrently.

        Returns:
            Error message per store name, None where the load succeeded
        """
        stores = {
            "attributes": self.attributes,
            "values": self.values,
            "categories": self.categories,
            "products": self.products,
            "orders": self.orders,
            "users": self.users,
        }
        await asyncio.gather(*(store.load_all() for store in stores.values()))
        errors = {name: store.error for name, store in stores.items()}
        failed = [name for name, error in errors.items() if error]
        if failed:
            logger.warning("Some collections failed to load", stores=failed)
        else:
            logger.info("All collections loaded")
        return errors

    def attribute_index(self) -> AttributeIndex:
        return AttributeIndex(self.attributes.items, self.values.items)

    def new_product_draft(self, name: str = "") -> ProductDraft:
        draft = ProductDraft(
            self.attribute_index(),
            qualify_with_id=self.settings.catalog.sku_qualify_with_id,
        )
        if name:
            draft.set_name(name)
        return draft

    def edit_product_draft(self, product_id: int) -> Optional[ProductDraft]:
        product = self.products.get(product_id)
        if product is None:
            return None
        return ProductDraft.from_product(
            product,
            self.attribute_index(),
            qualify_with_id=self.settings.catalog.sku_qualify_with_id,
        )

    def summary(self) -> DashboardSummary:
        return dashboard_summary(self.products.items, self.orders.items, self.users.items)
