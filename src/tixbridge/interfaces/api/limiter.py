"""Inbound per-client rate limiting for the /api routes, backed by slowapi.

Two application-wide limits apply to every request under ``/api/``:

- a spike limit shared by all methods
- a per-minute limit counted separately for GET, POST and PATCH

Clients are keyed by remote address. The limiter is built per application in
``create_app()``, attached to ``app.state.limiter`` and enforced by
``SlowAPIMiddleware``; routes outside ``/api/`` (health, root, websocket)
are never counted.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.wrappers import LimitGroup

from tixbridge.infrastructure.config import Settings

API_PREFIX = "/api/"

PER_METHOD_LIMITED = ["GET", "POST", "PATCH"]


def _outside_api(request: Request) -> bool:
    return not request.url.path.startswith(API_PREFIX)


class ApiLimiter(Limiter):
    """slowapi ``Limiter`` whose application limits only cover /api routes."""

    def __init__(self, *, per_second: str, per_minute: str, enabled: bool = True) -> None:
        super().__init__(
            key_func=get_remote_address,
            headers_enabled=True,
            storage_uri="memory://",
            enabled=enabled,
        )
        self._application_limits = [
            LimitGroup(
                limit_provider=per_second,
                key_function=self._key_func,
                scope="global",
                per_method=False,
                methods=None,
                error_message="Too many requests per second, please slow down.",
                exempt_when=_outside_api,
                cost=1,
                override_defaults=False,
            ),
            LimitGroup(
                limit_provider=per_minute,
                key_function=self._key_func,
                scope="global",
                per_method=True,
                methods=PER_METHOD_LIMITED,
                error_message="Too many requests per minute, please try again later.",
                exempt_when=_outside_api,
                cost=1,
                override_defaults=False,
            ),
        ]


def build_limiter(settings: Settings) -> ApiLimiter:
    """Create the inbound limiter from settings."""
    return ApiLimiter(
        per_second=settings.rate_limit_per_second,
        per_minute=settings.rate_limit_per_minute,
        enabled=settings.rate_limit_enabled,
    )


__all__ = ["API_PREFIX", "ApiLimiter", "build_limiter"]
