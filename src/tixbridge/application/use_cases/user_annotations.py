"""Per-user annotation use case.

Bookmarks, custom marketplace/listing links, manual section categories,
autopriced flags and listing tags. Every mutation that changes state is
broadcast to the global room so other dashboards refresh.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from tixbridge.domain.exceptions import InvalidRequestError
from tixbridge.domain.value_objects import AnnotationKey, ChangeEvent, Collection

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tixbridge.application.ports import AnnotationStorePort, BroadcasterPort

logger = structlog.get_logger(__name__)


def _require_text(value: str | None, field: str) -> str:
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        msg = f"{field} must be a non-empty string"
        raise InvalidRequestError(msg)
    return cleaned


class UserAnnotationsUseCase:
    """Reads and writes annotations owned by a single user."""

    def __init__(self, store: AnnotationStorePort, broadcaster: BroadcasterPort) -> None:
        self._store = store
        self._broadcaster = broadcaster

    async def _emit(self, name: str, data: dict[str, Any]) -> None:
        await self._broadcaster.publish(ChangeEvent(name=name, data=data))

    # === Bookmarks ===

    async def list_bookmarks(self, user_id: str) -> list[str]:
        records = await self._store.find(Collection.BOOKMARKS, user_id)
        return [record.subject_id for record in records]

    async def add_bookmark(self, user_id: str, event_id: str) -> bool:
        """Bookmark an event.

        Returns:
            False if the event was already bookmarked
        """
        event_id = _require_text(event_id, "eventId")
        key = AnnotationKey(collection=Collection.BOOKMARKS, owner_id=user_id, subject_id=event_id)
        added = await self._store.insert_if_absent(key)
        if added:
            await self._emit("bookmark-added", {"eventId": event_id, "userId": user_id})
        return added

    async def remove_bookmark(self, user_id: str, event_id: str) -> bool:
        key = AnnotationKey(collection=Collection.BOOKMARKS, owner_id=user_id, subject_id=event_id)
        removed = await self._store.delete(key)
        if removed:
            await self._emit("bookmark-removed", {"eventId": event_id, "userId": user_id})
        return removed

    # === Custom links ===

    async def get_marketplace_links(self, user_id: str, event_id: str) -> dict[str, str]:
        """Links keyed by lower-cased marketplace type."""
        records = await self._store.find(
            Collection.MARKETPLACE_LINKS, user_id, subject_id=event_id
        )
        return {record.qualifier.lower(): record.value for record in records}

    async def set_marketplace_link(
        self, user_id: str, event_id: str, marketplace_type: str, link: str
    ) -> None:
        marketplace_type = _require_text(marketplace_type, "marketplaceType")
        link = _require_text(link, "link")
        key = AnnotationKey(
            collection=Collection.MARKETPLACE_LINKS,
            owner_id=user_id,
            subject_id=event_id,
            qualifier=marketplace_type,
        )
        await self._store.upsert(key, link)
        await self._emit(
            "marketplace-link-updated",
            {
                "eventId": event_id,
                "userId": user_id,
                "marketplaceType": marketplace_type,
                "link": link,
            },
        )

    async def get_listing_links(self, user_id: str, listing_id: str) -> list[dict[str, Any]]:
        records = await self._store.find(Collection.LISTING_LINKS, user_id, subject_id=listing_id)
        return [
            {
                "listingId": record.subject_id,
                "marketplaceType": record.qualifier,
                "link": record.value,
                "updatedAt": record.updated_at.isoformat(),
            }
            for record in records
        ]

    async def set_listing_link(
        self, user_id: str, listing_id: str, marketplace_type: str, link: str
    ) -> None:
        marketplace_type = _require_text(marketplace_type, "marketplaceType")
        link = _require_text(link, "link")
        key = AnnotationKey(
            collection=Collection.LISTING_LINKS,
            owner_id=user_id,
            subject_id=listing_id,
            qualifier=marketplace_type,
        )
        await self._store.upsert(key, link)
        await self._emit(
            "listing-link-updated",
            {
                "listingId": listing_id,
                "userId": user_id,
                "marketplaceType": marketplace_type,
                "link": link,
            },
        )

    # === Manual categories ===

    async def get_manual_categories(self, user_id: str) -> dict[str, str]:
        records = await self._store.find(Collection.MANUAL_CATEGORIES, user_id)
        return {record.subject_id: record.value for record in records}

    async def set_manual_category(self, user_id: str, section: str, category: str) -> None:
        section = _require_text(section, "section")
        category = _require_text(category, "category")
        key = AnnotationKey(
            collection=Collection.MANUAL_CATEGORIES, owner_id=user_id, subject_id=section
        )
        await self._store.upsert(key, category)
        await self._emit(
            "manual-category-updated",
            {"section": section, "category": category, "userId": user_id},
        )

    async def delete_manual_category(self, user_id: str, section: str) -> bool:
        key = AnnotationKey(
            collection=Collection.MANUAL_CATEGORIES, owner_id=user_id, subject_id=section
        )
        deleted = await self._store.delete(key)
        if deleted:
            await self._emit("manual-category-deleted", {"section": section, "userId": user_id})
        return deleted

    # === Autopriced listings ===

    async def get_autopriced_listings(self, user_id: str) -> dict[str, bool]:
        records = await self._store.find(Collection.AUTOPRICED_LISTINGS, user_id)
        return {record.subject_id: bool(record.value) for record in records}

    async def set_autopriced(self, user_id: str, listing_id: str, is_autopriced: bool) -> None:
        key = AnnotationKey(
            collection=Collection.AUTOPRICED_LISTINGS, owner_id=user_id, subject_id=listing_id
        )
        await self._store.upsert(key, is_autopriced)
        await self._emit(
            "autopriced-listing-updated",
            {"listingId": listing_id, "isAutopriced": is_autopriced, "userId": user_id},
        )

    # === Listing tags ===

    async def get_listing_tags(self, user_id: str) -> dict[str, list[str]]:
        """Tags grouped by listing id, in insertion order."""
        tags: dict[str, list[str]] = {}
        for record in await self._store.find(Collection.LISTING_TAGS, user_id):
            tags.setdefault(record.subject_id, []).append(record.qualifier)
        return tags

    async def add_listing_tag(self, user_id: str, listing_id: str, tag: str) -> bool:
        tag = _require_text(tag, "tag")
        key = AnnotationKey(
            collection=Collection.LISTING_TAGS,
            owner_id=user_id,
            subject_id=listing_id,
            qualifier=tag,
        )
        added = await self._store.insert_if_absent(key)
        if added:
            await self._emit(
                "listing-tag-added", {"listingId": listing_id, "tag": tag, "userId": user_id}
            )
        return added

    async def remove_listing_tag(self, user_id: str, listing_id: str, tag: str) -> bool:
        key = AnnotationKey(
            collection=Collection.LISTING_TAGS,
            owner_id=user_id,
            subject_id=listing_id,
            qualifier=tag,
        )
        removed = await self._store.delete(key)
        if removed:
            await self._emit(
                "listing-tag-removed", {"listingId": listing_id, "tag": tag, "userId": user_id}
            )
        return removed

    async def add_bulk_listing_tags(
        self, user_id: str, listing_ids: Sequence[str], tag: str
    ) -> int:
        """Apply one tag to many listings. Not broadcast.

        Returns:
            Number of listings that did not carry the tag yet
        """
        if not listing_ids:
            msg = "listingIds must be a non-empty array"
            raise InvalidRequestError(msg)
        tag = _require_text(tag, "tag")
        keys = [
            AnnotationKey(
                collection=Collection.LISTING_TAGS,
                owner_id=user_id,
                subject_id=listing_id,
                qualifier=tag,
            )
            for listing_id in listing_ids
        ]
        inserted = await self._store.insert_many_if_absent(keys)
        logger.info("bulk_tags_added", requested=len(keys), inserted=inserted)
        return inserted


__all__ = ["UserAnnotationsUseCase"]
