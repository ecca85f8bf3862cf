"""HTTP and WebSocket routers."""

from tixbridge.interfaces.api.routers import (
    admin,
    auth,
    global_markers,
    health,
    realtime,
    user_data,
    vendor,
)

__all__ = ["admin", "auth", "global_markers", "health", "realtime", "user_data", "vendor"]
