"""HTTP client for the marketplace backend.

Every backend call goes through :meth:`BackendClient.request`, which unwraps
the ``{"status": 1, "message": ..., "data": ...}`` envelope and turns every
failure into :class:`RequestError` or :class:`NotFoundError`. Nothing is
retried: cancel and status changes are not safe to repeat blindly.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx

from admin_console.config import settings
from admin_console.core.exceptions import NotFoundError, RequestError
from admin_console.core.middleware import REQUEST_ID_HEADER, current_request_id
from admin_console.core.network import extract_error_message, network_error_message

logger = logging.getLogger(__name__)

# Envelope "status" values
ENVELOPE_OK = 1
ENVELOPE_FAILED = 0

T = TypeVar("T")


@dataclass
class BackendResponse:
    """Unwrapped backend envelope."""

    data: Any = field(default_factory=dict)
    message: str | None = None
    status_code: int = 200


class BackendClient:
    """Thin async wrapper around ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_api_url).rstrip("/")
        self._token = token if token is not None else settings.backend_api_token
        self._timeout = timeout if timeout is not None else settings.backend_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            headers = {"Accept": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            options: dict[str, Any] = {"base_url": self.base_url, "headers": headers}
            if self._timeout is not None:
                options["timeout"] = self._timeout
            if self._transport is not None:
                options["transport"] = self._transport
            self._http_client = httpx.AsyncClient(**options)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        error_message: str = "Request to the backend failed",
        resource: str | None = None,
        resource_id: str | None = None,
        strict_envelope: bool = False,
    ) -> BackendResponse:
        """Send one request and unwrap the envelope.

        Args:
            method: HTTP method
            path: Path relative to the backend base URL
            params: Query parameters
            json_body: JSON request body
            error_message: Fallback message when the backend gives none
            resource: Resource name used for 404 errors
            resource_id: Resource identifier used for 404 errors
            strict_envelope: Treat any envelope status other than 1 as a rejection

        Returns:
            BackendResponse with the envelope's ``data`` and ``message``

        Raises:
            NotFoundError: Backend answered 404 for a named resource
            RequestError: Transport failure, HTTP error or rejected envelope
        """
        request_id = current_request_id.get()
        headers = {REQUEST_ID_HEADER: request_id} if request_id else None
        try:
            response = await self.http_client.request(
                method, path, params=params, json=json_body, headers=headers
            )
        except httpx.TransportError as exc:
            logger.error(f"Backend unreachable: {method} {path}: {exc!r}")
            raise RequestError(
                network_error_message(exc) or error_message,
                is_network_error=True,
            ) from exc

        body = self._decode(response)

        if response.status_code == httpx.codes.NOT_FOUND and resource:
            logger.warning(f"Backend 404: {method} {path}")
            raise NotFoundError(resource, resource_id)

        if response.is_error:
            message = extract_error_message(body, error_message)
            logger.error(
                f"Backend error: {method} {path} -> {response.status_code}: {message}"
            )
            raise RequestError(message, upstream_status=response.status_code)

        if isinstance(body, dict) and self._rejected(body, strict_envelope):
            message = body.get("message") or error_message
            logger.error(f"Backend rejected: {method} {path}: {message}")
            raise RequestError(message, upstream_status=response.status_code)

        if isinstance(body, dict):
            return BackendResponse(
                data=body.get("data", body),
                message=body.get("message"),
                status_code=response.status_code,
            )
        return BackendResponse(data=body, status_code=response.status_code)

    @staticmethod
    def _rejected(body: dict[str, Any], strict: bool) -> bool:
        if strict:
            return body.get("status") != ENVELOPE_OK
        return body.get("status") == ENVELOPE_FAILED or body.get("success") is False

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text

    async def get(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> BackendResponse:
        return await self.request("PUT", path, **kwargs)


def adapt(build: Callable[[Any], T], data: Any, what: str) -> T:
    """Build a view model from envelope data.

    A payload the adapter cannot read is reported like any other backend
    failure instead of escaping as a pydantic error.
    """
    try:
        return build(data)
    except (ValueError, TypeError, AttributeError) as exc:
        logger.error(f"Malformed {what} payload from backend: {exc}")
        raise RequestError(f"Received malformed {what} data from the server") from exc
