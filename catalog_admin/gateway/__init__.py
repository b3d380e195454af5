"""
Remote Synchronization Gateway
"""
from .client import ApiClient
from .credentials import CredentialStore
from .errors import (
    AuthError,
    ConflictError,
    GatewayError,
    NotFoundError,
    RemoteRejectedError,
    TransientError,
)
from .resources import (
    AttributeGateway,
    AttributeValueGateway,
    AuthGateway,
    CategoryGateway,
    OrderGateway,
    ProductGateway,
    UserGateway,
)

__all__ = [
    "ApiClient",
    "CredentialStore",
    "AuthError",
    "ConflictError",
    "GatewayError",
    "NotFoundError",
    "RemoteRejectedError",
    "TransientError",
    "AttributeGateway",
    "AttributeValueGateway",
    "AuthGateway",
    "CategoryGateway",
    "OrderGateway",
    "ProductGateway",
    "UserGateway",
]
