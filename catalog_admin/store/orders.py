"""
Order and User Stores

Orders are read-only apart from status changes; users are read-only.
"""

from collections import Counter as Tally
from pathlib import Path
from typing import Dict, List, Optional, Union

import structlog

from catalog_admin.catalog.models import Order, OrderStatus, User
from catalog_admin.gateway.resources import OrderGateway, UserGateway
from catalog_admin.store.base import ReadableStore

logger = structlog.get_logger(__name__)


class OrderStore(ReadableStore[Order]):
    entity = "order"

    def __init__(self, gateway: OrderGateway, reject_concurrent: Optional[bool] = None):
        super().__init__(gateway, reject_concurrent)

    async def update_status(self, order_id: int, status: Union[OrderStatus, str]) -> Order:
        status = OrderStatus(status)
        record = await self._call(
            "update_status", lambda: self.gateway.update_status(order_id, status), order_id
        )
        self._replace(record)
        logger.info("Order status updated", order_id=order_id, status=status.value)
        return record

    async def download_receipt(
        self,
        order_id: int,
        path: Optional[Union[str, Path]] = None,
    ) -> bytes:
        """Fetch an order receipt; writes it to ``path`` when given"""
        content = await self._call("receipt", lambda: self.gateway.download_receipt(order_id))
        if path is not None:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            logger.info("Receipt saved", order_id=order_id, path=str(target), size=len(content))
        return content

    def search(
        self,
        query: str = "",
        status: Optional[Union[OrderStatus, str]] = None,
    ) -> List[Order]:
        """Filter cached orders by id or customer email, and by status"""
        needle = query.strip().lower()
        wanted = OrderStatus(status) if status else None
        results = []
        for order in self._items:
            if wanted is not None and order.status != wanted:
                continue
            if needle:
                email = order.user.email.lower() if order.user else ""
                if needle not in str(order.id) and needle not in email:
                    continue
            results.append(order)
        return results

    def status_counts(self) -> Dict[OrderStatus, int]:
        """Number of cached orders per status, every status present"""
        tally = Tally(order.status for order in self._items)
        return {status: tally.get(status, 0) for status in OrderStatus}


class UserStore(ReadableStore[User]):
    entity = "user"

    def __init__(self, gateway: UserGateway):
        super().__init__(gateway)

    def search(self, query: str = "") -> List[User]:
        """Filter cached users by id, email or any name field"""
        needle = query.strip().lower()
        if not needle:
            return self.items
        results = []
        for user in self._items:
            fields = [str(user.id), user.email, user.name, user.first_name, user.last_name]
            if any(needle in text.lower() for text in fields if text):
                results.append(user)
        return results

