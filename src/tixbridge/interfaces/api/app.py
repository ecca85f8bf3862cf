"""FastAPI application factory."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tixbridge import __version__
from tixbridge.infrastructure.config import Settings, get_settings
from tixbridge.infrastructure.logging import bind_request_context, clear_request_context
from tixbridge.interfaces.api.dependencies import ServiceContainer, build_container
from tixbridge.interfaces.api.errors import register_exception_handlers
from tixbridge.interfaces.api.limiter import build_limiter
from tixbridge.interfaces.api.routers import (
    admin,
    auth,
    global_markers,
    health,
    realtime,
    user_data,
    vendor,
)

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Application settings (defaults to get_settings())
        container: Pre-built services; built from settings when omitted

    Returns:
        Configured FastAPI application
    """
    if container is not None:
        settings = container.settings
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services = container or build_container(settings)
        app.state.container = services
        await services.start()
        logger.info("app_started", app_name=settings.app_name, port=settings.port)
        try:
            yield
        finally:
            await services.close()
            logger.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        description="Backend-for-frontend for the ticket marketplace dashboard",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.limiter = build_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        clear_request_context()
        bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app, debug=settings.debug)

    for module in (health, auth, admin, user_data, global_markers, vendor, realtime):
        app.include_router(module.router)

    return app


__all__ = ["create_app"]
