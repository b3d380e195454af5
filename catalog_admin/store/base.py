"""
Local Entity Stores

In-memory, last-known-good collection per entity type, mutated only after
the backend has confirmed an operation (optimistic-after-success):

- load_all: replace the collection; on failure keep the stale collection
  and record the error
- create: append the server-returned record
- update / toggle: replace the record with the server response
- remove: drop the record once the delete is confirmed

A failed remote call leaves the collection untouched, records the error
message for passive display and re-raises the typed gateway error.

Overlapping mutations on the same id are allowed by default; the last
response to resolve wins. With ``reject_concurrent`` a second mutation on an
id that already has one in flight is refused before any request is sent.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterator,
    List,
    Optional,
    TypeVar,
)

import structlog
from prometheus_client import Counter

from catalog_admin.catalog.models import CatalogModel
from catalog_admin.config import get_settings
from catalog_admin.gateway.errors import GatewayError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=CatalogModel)
ResultT = TypeVar("ResultT")


STORE_MUTATIONS = Counter(
    "catalog_admin_store_mutations_total",
    "Store operations by outcome",
    ["entity", "operation", "outcome"],
)


class StoreEvent(str, Enum):
    """Change notifications emitted to subscribers"""
    LOADED = "loaded"
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"


Listener = Callable[[StoreEvent, Any], None]


class MutationInFlightError(RuntimeError):
    """A mutation on this id is still awaiting its response"""

    def __init__(self, entity: str, entity_id: Hashable):
        super().__init__(f"A change to {entity} {entity_id} is already in progress")
        self.entity = entity
        self.entity_id = entity_id


class ReadableStore(Generic[ModelT]):
    """
    Cached collection of one entity type, loaded from a gateway.

    Example:
        store = OrderStore(OrderGateway(client))
        await store.load_all()
        store.items      # last-known-good records
        store.error      # last failure message, or None
    """

    entity: str = "record"

    def __init__(self, gateway: Any, reject_concurrent: Optional[bool] = None):
        settings = get_settings()
        self.gateway = gateway
        self.reject_concurrent = (
            settings.catalog.reject_concurrent_mutations
            if reject_concurrent is None
            else reject_concurrent
        )
        self._metrics_enabled = settings.monitoring.metrics_enabled
        self._items: List[ModelT] = []
        self._in_flight: Dict[Hashable, int] = {}
        self._listeners: List[Listener] = []
        self.is_loading = False
        self.error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Cache access
    # -------------------------------------------------------------------------

    @property
    def items(self) -> List[ModelT]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ModelT]:
        return iter(list(self._items))

    def get(self, entity_id: int) -> Optional[ModelT]:
        for item in self._items:
            if item.id == entity_id:
                return item
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    # -------------------------------------------------------------------------
    # Remote reads
    # -------------------------------------------------------------------------

    async def load_all(self) -> None:
        """Replace the collection; on failure keep it and record the error"""
        self.is_loading = True
        self.error = None
        try:
            records = await self.gateway.list()
        except GatewayError as e:
            self.error = e.message
            self._count("load", "failure")
            logger.warning(f"Failed to load {self.entity} collection", error=e.message)
            return
        finally:
            self.is_loading = False

        self._items = list(records)
        self._count("load", "success")
        logger.debug(f"{self.entity.capitalize()} collection loaded", count=len(self._items))
        self._emit(StoreEvent.LOADED, self.items)

    async def fetch(self, entity_id: int) -> ModelT:
        """Fetch one record from the backend without touching the cache"""
        return await self._call("fetch", lambda: self.gateway.get(entity_id))

    # -------------------------------------------------------------------------
    # Mutation plumbing
    # -------------------------------------------------------------------------

    def is_mutating(self, key: Hashable) -> bool:
        """True while a mutation keyed by an id (or a composite key) awaits its response"""
        return self._in_flight.get(key, 0) > 0

    @asynccontextmanager
    async def _mutation(self, entity_id: Optional[Hashable]) -> AsyncIterator[None]:
        if entity_id is None:
            yield
            return
        if self.reject_concurrent and self.is_mutating(entity_id):
            raise MutationInFlightError(self.entity, entity_id)
        self._in_flight[entity_id] = self._in_flight.get(entity_id, 0) + 1
        try:
            yield
        finally:
            remaining = self._in_flight[entity_id] - 1
            if remaining:
                self._in_flight[entity_id] = remaining
            else:
                del self._in_flight[entity_id]

    async def _call(
        self,
        operation: str,
        call: Callable[[], Awaitable[ResultT]],
        entity_id: Optional[Hashable] = None,
    ) -> ResultT:
        """Run one remote call, recording and re-raising its failure"""
        self.error = None
        async with self._mutation(entity_id):
            try:
                result = await call()
            except GatewayError as e:
                self.error = e.message
                self._count(operation, "failure")
                logger.warning(
                    f"{self.entity.capitalize()} {operation} failed",
                    entity_id=entity_id,
                    error=e.message,
                    error_type=type(e).__name__,
                )
                raise
        self._count(operation, "success")
        return result

    def _count(self, operation: str, outcome: str) -> None:
        if self._metrics_enabled:
            STORE_MUTATIONS.labels(entity=self.entity, operation=operation, outcome=outcome).inc()

    def _insert(self, record: ModelT) -> None:
        if self.get(record.id) is not None:
            self._replace(record)
            return
        self._items = [*self._items, record]
        self._emit(StoreEvent.CREATED, record)

    def _replace(self, record: ModelT) -> None:
        self._items = [record if item.id == record.id else item for item in self._items]
        self._emit(StoreEvent.UPDATED, record)

    def _drop(self, entity_id: int) -> None:
        self._items = [item for item in self._items if item.id != entity_id]
        self._emit(StoreEvent.REMOVED, entity_id)


class EntityStore(ReadableStore[ModelT]):
    """Cached collection with create/update/remove against the backend"""

    def validate_create(self, payload: CatalogModel) -> None:
        """Raise CatalogValidationError to stop a create before any request"""

    def validate_update(self, entity_id: int, payload: CatalogModel) -> None:
        """Raise CatalogValidationError to stop an update before any request"""

    async def create(self, payload: CatalogModel) -> ModelT:
        self.validate_create(payload)
        record = await self._call("create", lambda: self.gateway.create(payload))
        self._insert(record)
        logger.info(f"{self.entity.capitalize()} created", entity_id=record.id)
        return record

    async def update(self, entity_id: int, payload: CatalogModel) -> ModelT:
        self.validate_update(entity_id, payload)
        record = await self._call("update", lambda: self.gateway.update(entity_id, payload), entity_id)
        self._replace(record)
        logger.info(f"{self.entity.capitalize()} updated", entity_id=entity_id)
        return record

    async def remove(self, entity_id: int) -> None:
        await self._call("delete", lambda: self.gateway.delete(entity_id), entity_id)
        self._drop(entity_id)
        logger.info(f"{self.entity.capitalize()} deleted", entity_id=entity_id)

    async def _toggle(
        self,
        entity_id: Hashable,
        operation: str,
        call: Callable[[], Awaitable[ModelT]],
    ) -> ModelT:
        """Server computes the new flag; the record is replaced with its response"""
        record = await self._call(operation, call, entity_id)
        self._replace(record)
        return record
