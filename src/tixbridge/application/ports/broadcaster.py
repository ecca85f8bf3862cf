"""Port interface for real-time change notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tixbridge.domain.value_objects import ChangeEvent


class BroadcasterPort(ABC):
    """Publish-to-room primitive."""

    @abstractmethod
    async def publish(self, event: ChangeEvent) -> int:
        """Send an event to every client in ``event.room``.

        Returns:
            Number of clients the event was delivered to
        """
        ...


__all__ = ["BroadcasterPort"]
