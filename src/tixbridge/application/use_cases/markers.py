"""Listing marker use case.

Markers are opaque per-listing flags and dates (verification, mapping,
strategy). The same operations serve per-user sets and the shared sets, the
only difference being the owner id and whether ``userId`` is included in the
broadcast payload.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from tixbridge.domain.value_objects import GLOBAL_OWNER, AnnotationKey, ChangeEvent

if TYPE_CHECKING:
    from tixbridge.application.ports import AnnotationStorePort, BroadcasterPort
    from tixbridge.domain.value_objects import MarkerSet

logger = structlog.get_logger(__name__)


class MarkersUseCase:
    """Flag and date markers for user-owned and shared marker sets."""

    def __init__(self, store: AnnotationStorePort, broadcaster: BroadcasterPort) -> None:
        self._store = store
        self._broadcaster = broadcaster

    def _key(self, marker: MarkerSet, owner_id: str, listing_id: str) -> AnnotationKey:
        return AnnotationKey(collection=marker.collection, owner_id=owner_id, subject_id=listing_id)

    async def _emit(
        self, name: str | None, owner_id: str, data: dict[str, Any]
    ) -> None:
        if name is None:
            return
        if owner_id != GLOBAL_OWNER:
            data = {**data, "userId": owner_id}
        await self._broadcaster.publish(ChangeEvent(name=name, data=data))

    # === Flags ===

    async def list_flags(self, marker: MarkerSet, owner_id: str = GLOBAL_OWNER) -> list[str]:
        records = await self._store.find(marker.collection, owner_id)
        return [record.subject_id for record in records]

    async def add_flag(
        self, marker: MarkerSet, listing_id: str, owner_id: str = GLOBAL_OWNER
    ) -> bool:
        added = await self._store.insert_if_absent(self._key(marker, owner_id, listing_id))
        if added:
            await self._emit(marker.added_event, owner_id, {"listingId": listing_id})
        return added

    async def remove_flag(
        self, marker: MarkerSet, listing_id: str, owner_id: str = GLOBAL_OWNER
    ) -> bool:
        removed = await self._store.delete(self._key(marker, owner_id, listing_id))
        if removed:
            await self._emit(marker.removed_event, owner_id, {"listingId": listing_id})
        return removed

    # === Dates ===

    async def list_dates(self, marker: MarkerSet, owner_id: str = GLOBAL_OWNER) -> dict[str, str]:
        """ISO-8601 dates keyed by listing id."""
        records = await self._store.find(marker.collection, owner_id)
        return {record.subject_id: record.value for record in records}

    async def set_date(
        self,
        marker: MarkerSet,
        listing_id: str,
        when: datetime,
        owner_id: str = GLOBAL_OWNER,
    ) -> str:
        """Store a date marker.

        Returns:
            The stored ISO-8601 value
        """
        value = when.isoformat()
        await self._store.upsert(self._key(marker, owner_id, listing_id), value)
        await self._emit(
            marker.added_event,
            owner_id,
            {"listingId": listing_id, marker.date_field: value},
        )
        return value

    async def remove_date(
        self, marker: MarkerSet, listing_id: str, owner_id: str = GLOBAL_OWNER
    ) -> bool:
        removed = await self._store.delete(self._key(marker, owner_id, listing_id))
        if removed:
            await self._emit(marker.removed_event, owner_id, {"listingId": listing_id})
        return removed


__all__ = ["MarkersUseCase"]
