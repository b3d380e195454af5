"""
REST API Client

Thin async transport over the admin backend:
- Bearer token injection from the persisted credentials
- Envelope unwrapping ({message, status, data} -> data)
- Typed error mapping (conflict, not found, auth, transient, rejected)
- 401 handling: credentials are cleared and the unauthorized callback runs,
  unless the failing request is the login call itself
- Request metrics and structured logs

No retries: a failed call is surfaced once.
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx
import structlog
from prometheus_client import Counter, Histogram

from catalog_admin.config import get_settings
from catalog_admin.gateway.credentials import CredentialStore
from catalog_admin.gateway.errors import (
    AuthError,
    GatewayError,
    RemoteRejectedError,
    TransientError,
    error_for_status,
)

logger = structlog.get_logger(__name__)


# =============================================================================
# METRICS
# =============================================================================

GATEWAY_REQUESTS = Counter(
    "catalog_admin_gateway_requests_total",
    "Total number of backend requests",
    ["method", "resource", "outcome"],
)

GATEWAY_LATENCY = Histogram(
    "catalog_admin_gateway_request_seconds",
    "Backend request latency",
    ["method", "resource"],
)


def _resource_label(path: str) -> str:
    return path.strip("/").split("/")[0] or "root"


def unwrap_envelope(body: Any) -> Any:
    """Return the ``data`` member of a {message, status, data} envelope"""
    if isinstance(body, dict) and "data" in body and ("status" in body or "message" in body):
        if body.get("status") == "error":
            raise RemoteRejectedError(body.get("message") or "Request rejected")
        return body["data"]
    return body


class ApiClient:
    """
    Async client for the admin REST backend.

    Example:
        async with ApiClient() as client:
            products = await client.request("GET", "/products", action="fetch products")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        credentials: Optional[CredentialStore] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.api.base_url
        self.login_path = settings.api.login_path
        self.credentials = credentials if credentials is not None else CredentialStore()
        self.on_unauthorized = on_unauthorized
        self._metrics_enabled = settings.monitoring.metrics_enabled
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.api.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        token = self.credentials.token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _record(self, method: str, resource: str, outcome: str, duration: float) -> None:
        if not self._metrics_enabled:
            return
        GATEWAY_REQUESTS.labels(method=method, resource=resource, outcome=outcome).inc()
        GATEWAY_LATENCY.labels(method=method, resource=resource).observe(duration)

    async def _send(
        self,
        method: str,
        path: str,
        action: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        resource = _resource_label(path)
        start_time = time.perf_counter()

        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=self._headers(),
            )
        except httpx.TimeoutException as e:
            self._record(method, resource, "timeout", time.perf_counter() - start_time)
            logger.warning("Request timed out", method=method, path=path, action=action)
            raise TransientError(f"Failed to {action}: request timed out", action=action) from e
        except httpx.TransportError as e:
            self._record(method, resource, "network_error", time.perf_counter() - start_time)
            logger.warning("Request failed", method=method, path=path, action=action, error=str(e))
            raise TransientError(f"Failed to {action}: {e}", action=action) from e

        duration = time.perf_counter() - start_time

        if response.is_success:
            self._record(method, resource, "success", duration)
            logger.debug(
                "Request completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response

        self._record(method, resource, str(response.status_code), duration)
        raise self._error_for(response, path, action)

    def _error_for(self, response: httpx.Response, path: str, action: str) -> GatewayError:
        message = _error_message(response) or f"Failed to {action}"
        error_cls = error_for_status(response.status_code)

        if error_cls is AuthError:
            self.credentials.clear()
            is_login_request = path.rstrip("/").endswith(self.login_path.rstrip("/"))
            if not is_login_request and self.on_unauthorized is not None:
                self.on_unauthorized()

        logger.warning(
            "Request rejected",
            path=path,
            action=action,
            status_code=response.status_code,
            message=message,
        )
        return error_cls(message, status_code=response.status_code, action=action)

    async def request(
        self,
        method: str,
        path: str,
        action: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a request and return the unwrapped envelope data.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            action: Human-readable name of the attempted action, used in
                error messages ("create product")
            json: JSON body
            params: Query parameters

        Returns:
            The envelope's ``data`` (or the raw body if not enveloped),
            None for empty responses

        Raises:
            GatewayError: Typed remote failure
        """
        response = await self._send(method, path, action, json=json, params=params)
        if response.status_code == 204 or not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise TransientError(f"Failed to {action}: invalid response body", action=action) from e
        return unwrap_envelope(body)

    async def request_bytes(self, method: str, path: str, action: str) -> bytes:
        """Issue a request expecting a binary body (e.g. a PDF receipt)"""
        response = await self._send(method, path, action)
        return response.content


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return None
