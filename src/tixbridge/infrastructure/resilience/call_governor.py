"""Outbound call governor for the vendor API.

Every request to the vendor goes through one FIFO queue drained by a single
asyncio task:
- calls are dispatched in submission order, one at a time
- consecutive dispatches are at least ``min_interval`` seconds apart
- a failing call rejects only its own future; the queue keeps draining
"""

from __future__ import annotations

import asyncio
import contextvars
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class QueuedCall(Generic[T]):
    """A pending upstream request and the future awaiting its outcome."""

    thunk: Callable[[], Awaitable[T]]
    future: asyncio.Future[T]


class CallGovernor:
    """Single-lane, paced dispatcher for upstream calls.

    Usage:
        governor = CallGovernor("vendor_api", min_interval=0.5)

        response = await governor.submit(lambda: client.get(url))
    """

    def __init__(
        self,
        service_name: str,
        *,
        min_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the governor.

        Args:
            service_name: Name for logging
            min_interval: Minimum seconds between two dispatched calls
            clock: Monotonic clock returning seconds
            sleep: Awaitable sleep used for pacing
        """
        self.service_name = service_name
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep

        self._queue: deque[QueuedCall[Any]] = deque()
        self._draining = False
        self._drain_task: asyncio.Task[None] | None = None
        self._last_dispatch: float | None = None

        self._dispatched = 0
        self._failed = 0

        logger.debug(
            "call_governor_initialized",
            service=service_name,
            min_interval=min_interval,
        )

    @property
    def is_draining(self) -> bool:
        """True while a drain task is dispatching queued calls."""
        return self._draining

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    def submit(self, thunk: Callable[[], Awaitable[T]]) -> asyncio.Future[T]:
        """Queue a call and return a future for its outcome.

        The thunk is invoked exactly once, when its turn comes. Must be
        called from within a running event loop.

        Args:
            thunk: Zero-argument callable performing the upstream request

        Returns:
            Future resolved with the thunk's result or its exception
        """
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._queue.append(QueuedCall(thunk=thunk, future=future))
        logger.debug(
            "governor_call_queued",
            service=self.service_name,
            queue_size=len(self._queue),
        )
        self._ensure_draining()
        return future

    def _ensure_draining(self) -> None:
        if self._draining:
            return
        self._draining = True
        # Drain task logs carry no request bindings
        self._drain_task = asyncio.create_task(self._drain(), context=contextvars.Context())

    async def _drain(self) -> None:
        """Dispatch queued calls until the queue is empty."""
        try:
            while self._queue:
                await self._wait_for_turn()
                await self._dispatch(self._queue.popleft())
        finally:
            self._draining = False

    async def _wait_for_turn(self) -> None:
        """Sleep out the remainder of the pacing interval, then stamp the dispatch."""
        if self._last_dispatch is not None:
            remaining = self.min_interval - (self._clock() - self._last_dispatch)
            if remaining > 0:
                await self._sleep(remaining)
        self._last_dispatch = self._clock()

    async def _dispatch(self, call: QueuedCall[Any]) -> None:
        self._dispatched += 1
        try:
            result = await call.thunk()
        except asyncio.CancelledError:
            call.future.cancel()
            raise
        except Exception as e:
            self._failed += 1
            logger.debug(
                "governor_call_failed",
                service=self.service_name,
                error_type=type(e).__name__,
            )
            if not call.future.done():
                call.future.set_exception(e)
        else:
            if not call.future.done():
                call.future.set_result(result)

    async def aclose(self) -> None:
        """Stop draining and cancel calls that were never dispatched."""
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        self._draining = False
        while self._queue:
            self._queue.popleft().future.cancel()
        logger.info("call_governor_closed", service=self.service_name)

    def get_stats(self) -> dict:
        """Get governor statistics."""
        return {
            "service": self.service_name,
            "min_interval": self.min_interval,
            "queue_size": len(self._queue),
            "draining": self._draining,
            "dispatched": self._dispatched,
            "failed": self._failed,
            "seconds_since_last_dispatch": self._clock() - self._last_dispatch
            if self._last_dispatch is not None
            else None,
        }


# Pre-configured governor for the vendor API
def create_vendor_governor(*, min_interval: float = 0.5) -> CallGovernor:
    """Create the call governor shared by all vendor API requests.

    Args:
        min_interval: Minimum seconds between dispatched calls

    Returns:
        Configured CallGovernor
    """
    return CallGovernor("vendor_api", min_interval=min_interval)


__all__ = ["CallGovernor", "QueuedCall", "create_vendor_governor"]
