"""Exponential backoff bookkeeping for upstream rate-limit rejections.

Each HTTP 429 from the vendor is a strike. Strikes within the reset window
grow the delay: 1s, 2s, 4s, 8s, then capped at 10s. A strike arriving after
the window has elapsed starts over at the base delay.

The delay is paid by the caller before it reports the 429 to its own client;
the rejected request is never resubmitted.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.get_logger(__name__)


class RateLimitBackoff:
    """Strike counter with capped exponential delay."""

    def __init__(
        self,
        service_name: str,
        *,
        base_delay: float = 1.0,
        multiplier: float = 2.0,
        max_delay: float = 10.0,
        reset_window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize backoff tracker.

        Args:
            service_name: Name for logging
            base_delay: Delay in seconds after the first strike
            multiplier: Growth factor per consecutive strike
            max_delay: Upper bound on the delay in seconds
            reset_window: Seconds without a strike after which the count resets
            clock: Monotonic clock returning seconds
            sleep: Awaitable sleep used to pay the delay
        """
        self.service_name = service_name
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.max_delay = max_delay
        self.reset_window = reset_window
        self._clock = clock
        self._sleep = sleep

        self._strikes = 0
        self._last_strike: float | None = None

    @property
    def strikes(self) -> int:
        return self._strikes

    def record_strike(self) -> float:
        """Count a rate-limit rejection and return the delay it earns.

        Returns:
            Delay in seconds
        """
        now = self._clock()
        if self._last_strike is None or now - self._last_strike > self.reset_window:
            self._strikes = 0

        self._strikes += 1
        self._last_strike = now

        return min(self.base_delay * self.multiplier ** (self._strikes - 1), self.max_delay)

    async def strike(self) -> float:
        """Record a strike and wait out its delay.

        Returns:
            The delay that was paid, in seconds
        """
        delay = self.record_strike()
        logger.warning(
            "rate_limit_backoff",
            service=self.service_name,
            strikes=self._strikes,
            delay=delay,
        )
        await self._sleep(delay)
        return delay

    @property
    def retry_after(self) -> int:
        """Seconds a client is told to wait before retrying."""
        return min(self._strikes * 2, 10)

    def reset(self) -> None:
        self._strikes = 0
        self._last_strike = None

    def get_stats(self) -> dict:
        """Get backoff statistics."""
        return {
            "service": self.service_name,
            "strikes": self._strikes,
            "seconds_since_last_strike": self._clock() - self._last_strike
            if self._last_strike is not None
            else None,
        }


def create_vendor_backoff(
    *,
    base_delay: float = 1.0,
    multiplier: float = 2.0,
    max_delay: float = 10.0,
    reset_window: float = 60.0,
) -> RateLimitBackoff:
    """Create the backoff tracker for vendor 429 responses.

    Returns:
        Configured RateLimitBackoff
    """
    return RateLimitBackoff(
        "vendor_api",
        base_delay=base_delay,
        multiplier=multiplier,
        max_delay=max_delay,
        reset_window=reset_window,
    )


__all__ = ["RateLimitBackoff", "create_vendor_backoff"]
