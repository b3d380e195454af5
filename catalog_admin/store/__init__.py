"""
Local Entity Stores
"""
from .base import EntityStore, MutationInFlightError, ReadableStore, StoreEvent
from .catalog import AttributeStore, AttributeValueStore, CategoryStore, ProductStore
from .orders import OrderStore, UserStore

__all__ = [
    "EntityStore",
    "MutationInFlightError",
    "ReadableStore",
    "StoreEvent",
    "AttributeStore",
    "AttributeValueStore",
    "CategoryStore",
    "ProductStore",
    "OrderStore",
    "UserStore",
]
