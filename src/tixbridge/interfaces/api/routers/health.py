"""Operational endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from tixbridge.interfaces.api.dependencies import Container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: Container) -> dict[str, Any]:
    return {
        "status": "OK",
        "message": "Proxy server is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": container.uptime,
        "database": await container.database.health_check(),
        "governor": container.governor.get_stats(),
        "backoff": container.backoff.get_stats(),
        "websocket": {
            "connections": container.broadcaster.connection_count,
            "rooms": container.broadcaster.room_sizes(),
        },
    }


@router.get("/")
async def root(container: Container) -> dict[str, Any]:
    return {
        "status": "OK",
        "message": f"{container.settings.app_name} API server",
        "health": "/health",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime": container.uptime,
    }
