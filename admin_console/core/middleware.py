"""Request middleware for the console API."""

import logging
import time
import uuid
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from admin_console.config import settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Read by BackendClient so backend calls carry the console request's ID
current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, time it and log admin actions."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Run the request with its ID bound for downstream backend calls.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response: Route response with ID and timing headers
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = current_request_id.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            current_request_id.reset(token)
        elapsed = time.perf_counter() - started

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        summary = f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s"
        if elapsed > settings.slow_request_seconds:
            logger.warning(f"Slow request: {summary}")
        elif request.method in MUTATING_METHODS:
            logger.info(f"Admin action: {summary}")
        else:
            logger.debug(summary)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers; console responses carry personal data and are never cached."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers.update(
            {
                "X-Content-Type-Options": "nosniff",
                "X-Frame-Options": "DENY",
                "Referrer-Policy": "no-referrer",
                "Cache-Control": "no-store",
            }
        )
        return response
