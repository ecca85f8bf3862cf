"""Service wiring and FastAPI dependencies."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Annotated

import httpx
import structlog
from fastapi import Depends, Header, Request

from tixbridge.adapters.external_apis import VendorClient
from tixbridge.adapters.persistence import Database, SQLAlchemyAnnotationStore, SQLAlchemyUserStore
from tixbridge.adapters.realtime import ConnectionManager
from tixbridge.application.use_cases import (
    MarkersUseCase,
    UserAdminUseCase,
    UserAnnotationsUseCase,
    VendorProxyUseCase,
)
from tixbridge.domain.entities import User
from tixbridge.domain.exceptions import PermissionDeniedError
from tixbridge.infrastructure.config import Settings
from tixbridge.infrastructure.resilience import (
    CallGovernor,
    RateLimitBackoff,
    create_vendor_backoff,
    create_vendor_governor,
)

logger = structlog.get_logger(__name__)


@dataclass
class ServiceContainer:
    """Process-wide services shared by every request."""

    settings: Settings
    database: Database
    governor: CallGovernor
    backoff: RateLimitBackoff
    vendor_client: VendorClient
    broadcaster: ConnectionManager
    vendor: VendorProxyUseCase
    users: UserAdminUseCase
    annotations: UserAnnotationsUseCase
    markers: MarkersUseCase
    started_at: float = field(default_factory=time.monotonic)

    async def start(self) -> None:
        await self.database.initialize()
        logger.info("services_started", environment=self.settings.environment)

    async def close(self) -> None:
        await self.governor.aclose()
        await self.vendor_client.close()
        await self.database.dispose()
        logger.info("services_stopped")

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at


def build_container(
    settings: Settings, *, http_client: httpx.AsyncClient | None = None
) -> ServiceContainer:
    """Wire adapters and use cases from settings.

    Args:
        settings: Application settings
        http_client: Optional pre-configured httpx client for the vendor API

    Returns:
        ServiceContainer ready to be started
    """
    governor = create_vendor_governor(min_interval=settings.governor_min_interval)
    backoff = create_vendor_backoff(
        base_delay=settings.backoff_base_delay,
        multiplier=settings.backoff_multiplier,
        max_delay=settings.backoff_max_delay,
        reset_window=settings.backoff_reset_window,
    )
    vendor_client = VendorClient(settings, governor, client=http_client)
    database = Database(settings.database_url)
    annotation_store = SQLAlchemyAnnotationStore(database)
    broadcaster = ConnectionManager()

    return ServiceContainer(
        settings=settings,
        database=database,
        governor=governor,
        backoff=backoff,
        vendor_client=vendor_client,
        broadcaster=broadcaster,
        vendor=VendorProxyUseCase(vendor_client, backoff),
        users=UserAdminUseCase(SQLAlchemyUserStore(database)),
        annotations=UserAnnotationsUseCase(annotation_store, broadcaster),
        markers=MarkersUseCase(annotation_store, broadcaster),
    )


# === FastAPI dependencies ===


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


Container = Annotated[ServiceContainer, Depends(get_container)]


async def current_user(
    container: Container,
    x_username: Annotated[str | None, Header()] = None,
) -> User:
    """Caller identified by the ``x-username`` header."""
    return await container.users.resolve_username(x_username)


async def token_user(
    container: Container,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Caller identified by an ``Authorization: Bearer <token>`` header."""
    token = None
    if authorization:
        parts = authorization.split()
        if len(parts) > 1:
            token = parts[1]
    return await container.users.resolve_token(token)


async def require_admin(user: Annotated[User, Depends(token_user)]) -> User:
    if not user.is_admin:
        msg = "Admin access required"
        raise PermissionDeniedError(msg)
    return user


CurrentUser = Annotated[User, Depends(current_user)]
AdminUser = Annotated[User, Depends(require_admin)]


__all__ = [
    "AdminUser",
    "Container",
    "CurrentUser",
    "ServiceContainer",
    "build_container",
    "current_user",
    "get_container",
    "require_admin",
    "token_user",
]
