"""
Gateway error taxonomy.

Every failure of a remote call surfaces as one of these; callers never see
transport-specific error shapes.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for remote failures"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        action: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.action = action

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status_code={self.status_code!r})"


class ConflictError(GatewayError):
    """Uniqueness violation, e.g. a duplicate slug or SKU (409)"""


class NotFoundError(GatewayError):
    """Stale id: the entity no longer exists (404)"""


class AuthError(GatewayError):
    """Missing or expired credentials (401)"""


class TransientError(GatewayError):
    """Network failure, timeout or server error; retry manually"""


class RemoteRejectedError(GatewayError):
    """Any other client error reported by the backend (4xx)"""


def error_for_status(status_code: int) -> type:
    if status_code == 409:
        return ConflictError
    if status_code == 404:
        return NotFoundError
    if status_code == 401:
        return AuthError
    if status_code >= 500:
        return TransientError
    return RemoteRejectedError
