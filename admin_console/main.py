"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from admin_console.api.deps import VerificationLocks
from admin_console.api.v1.router import api_router
from admin_console.config import settings
from admin_console.core.exceptions import AppException, ValidationError
from admin_console.core.logging_config import configure_logging
from admin_console.core.middleware import (
    REQUEST_ID_HEADER,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from admin_console.services.backend_client import BackendClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Own the backend client and the verification locks for the app's lifetime."""
    # A client injected through create_application() is used as is
    client: BackendClient = app.state.backend_client or BackendClient()
    app.state.backend_client = client
    app.state.verification_locks = VerificationLocks()
    logger.info(f"{settings.app_name} {settings.app_version} using backend {client.base_url}")

    try:
        yield
    finally:
        await client.close()
        logger.info("Backend client closed")


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render AppException as ``{"detail": ...}``, plus field errors for validation failures."""
    content: dict = {"detail": exc.detail}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def create_application(backend_client: BackendClient | None = None) -> FastAPI:
    """Build the console API; ``backend_client`` replaces the default one."""
    configure_logging()

    docs_enabled = settings.debug
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Marketplace admin console: bookings, providers and KYC review",
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.backend_client = backend_client
    app.add_exception_handler(AppException, app_exception_handler)

    # Last added runs first
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "backend": request.app.state.backend_client.base_url,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("admin_console.main:app", host=settings.host, port=settings.port, reload=settings.debug)
