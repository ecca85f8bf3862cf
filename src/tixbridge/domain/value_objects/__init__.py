"""Domain value objects for tixbridge."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Owner id used by collections shared across all users
GLOBAL_OWNER = ""

# Room every client may join for shared updates
GLOBAL_ROOM = "global"


def user_room(user_id: str) -> str:
    """Room name for updates addressed to a single user."""
    return f"user-{user_id}"


class Collection(StrEnum):
    """Logical annotation collections."""

    BOOKMARKS = "bookmarks"
    MARKETPLACE_LINKS = "marketplace_links"
    LISTING_LINKS = "listing_links"
    MANUAL_CATEGORIES = "manual_categories"
    AUTOPRICED_LISTINGS = "autopriced_listings"
    LISTING_TAGS = "listing_tags"
    UNVERIFICATION_DATES = "unverification_dates"
    VERIFICATION_MAPPED = "verification_mapped"
    VERIFICATION_STRATEGY = "verification_strategy"
    VERIFICATION_STRATEGY_DATES = "verification_strategy_dates"
    THREE_DAY_MAPPED = "three_day_mapped"
    THREE_DAY_STRATEGY = "three_day_strategy"
    GLOBAL_VERIFICATION_MAPPED = "global_verification_mapped"
    GLOBAL_VERIFICATION_STRATEGY = "global_verification_strategy"
    GLOBAL_VERIFICATION_STRATEGY_DATES = "global_verification_strategy_dates"
    GLOBAL_THREE_DAY_MAPPED = "global_three_day_mapped"
    GLOBAL_THREE_DAY_STRATEGY = "global_three_day_strategy"
    STARRED_FESTIVAL_MAPPED = "starred_festival_mapped"
    STARRED_FESTIVAL_STRATEGY = "starred_festival_strategy"
    STARRED_FESTIVAL_STRATEGY_DATES = "starred_festival_strategy_dates"


class AnnotationKey(BaseModel):
    """Compound key identifying one annotation record.

    ``owner_id`` is a user id, or GLOBAL_OWNER for shared collections.
    ``qualifier`` disambiguates several records on the same subject
    (marketplace type, tag text); empty when unused.
    """

    model_config = ConfigDict(frozen=True)

    collection: Collection
    owner_id: str = GLOBAL_OWNER
    subject_id: str = Field(..., min_length=1)
    qualifier: str = ""


class AnnotationRecord(BaseModel):
    """A stored annotation with its payload."""

    model_config = ConfigDict(frozen=True)

    key: AnnotationKey
    value: Any = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def subject_id(self) -> str:
        return self.key.subject_id

    @property
    def qualifier(self) -> str:
        return self.key.qualifier


class MarkerSet(BaseModel):
    """A family of opaque per-listing markers exposed under one route segment.

    ``flag`` markers are presence-only sets of listing ids; ``date`` markers
    map listing ids to a date. When ``event_prefix`` is set, changes are
    broadcast as ``<prefix>-added``/``<prefix>-removed`` (flags) or
    ``<prefix>-updated``/``<prefix>-removed`` (dates).

    ``added_message`` and ``removed_message`` are returned to the caller after
    a change. Listing responses carry ``success: true`` unless ``list_envelope``
    is off.
    """

    model_config = ConfigDict(frozen=True)

    slug: str
    collection: Collection
    kind: Literal["flag", "date"] = "flag"
    response_key: str
    event_prefix: str | None = None
    date_field: str = "strategyDate"
    added_message: str = "Listing marked"
    removed_message: str = "Listing unmarked"
    list_envelope: bool = True

    def list_response(self, values: Any) -> dict[str, Any]:
        if self.list_envelope:
            return {"success": True, self.response_key: values}
        return {self.response_key: values}

    @property
    def added_event(self) -> str | None:
        if self.event_prefix is None:
            return None
        suffix = "added" if self.kind == "flag" else "updated"
        return f"{self.event_prefix}-{suffix}"

    @property
    def removed_event(self) -> str | None:
        if self.event_prefix is None:
            return None
        return f"{self.event_prefix}-removed"


USER_FLAG_MARKERS: tuple[MarkerSet, ...] = (
    MarkerSet(
        slug="verification-mapped-listings",
        collection=Collection.VERIFICATION_MAPPED,
        response_key="mappedListings",
        event_prefix="verification-mapped",
        added_message="Listing marked as mapped",
        removed_message="Listing unmarked as mapped",
    ),
    MarkerSet(
        slug="verification-strategy-listings",
        collection=Collection.VERIFICATION_STRATEGY,
        response_key="strategyListings",
        event_prefix="verification-strategy",
        added_message="Listing marked for strategy",
        removed_message="Listing unmarked for strategy",
    ),
    MarkerSet(
        slug="three-day-mapped-listings",
        collection=Collection.THREE_DAY_MAPPED,
        response_key="mappedListings",
        event_prefix="three-day-mapped",
        added_message="Listing marked as mapped",
        removed_message="Listing unmarked as mapped",
    ),
    MarkerSet(
        slug="three-day-strategy-listings",
        collection=Collection.THREE_DAY_STRATEGY,
        response_key="strategyListings",
        event_prefix="three-day-strategy",
        added_message="Listing marked for strategy",
        removed_message="Listing unmarked for strategy",
    ),
)

USER_DATE_MARKERS: tuple[MarkerSet, ...] = (
    MarkerSet(
        slug="unverification-dates",
        collection=Collection.UNVERIFICATION_DATES,
        kind="date",
        response_key="dates",
        date_field="unverificationDate",
        added_message="Unverification date saved",
        removed_message="Unverification date removed",
        list_envelope=False,
    ),
    MarkerSet(
        slug="verification-strategy-dates",
        collection=Collection.VERIFICATION_STRATEGY_DATES,
        kind="date",
        response_key="strategyDates",
        added_message="Strategy date saved",
        removed_message="Strategy date removed",
    ),
)

GLOBAL_FLAG_MARKERS: tuple[MarkerSet, ...] = (
    MarkerSet(
        slug="verification-mapped-listings",
        collection=Collection.GLOBAL_VERIFICATION_MAPPED,
        response_key="mappedListings",
        event_prefix="global-verification-mapped",
        added_message="Listing marked as mapped globally",
        removed_message="Listing unmarked as mapped globally",
    ),
    MarkerSet(
        slug="verification-strategy-listings",
        collection=Collection.GLOBAL_VERIFICATION_STRATEGY,
        response_key="strategyListings",
        event_prefix="global-verification-strategy",
        added_message="Listing marked for strategy globally",
        removed_message="Listing unmarked for strategy globally",
    ),
    MarkerSet(
        slug="three-day-mapped-listings",
        collection=Collection.GLOBAL_THREE_DAY_MAPPED,
        response_key="mappedListings",
        event_prefix="global-three-day-mapped",
        added_message="Listing marked as mapped globally",
        removed_message="Listing unmarked as mapped globally",
    ),
    MarkerSet(
        slug="three-day-strategy-listings",
        collection=Collection.GLOBAL_THREE_DAY_STRATEGY,
        response_key="strategyListings",
        event_prefix="global-three-day-strategy",
        added_message="Listing marked for strategy globally",
        removed_message="Listing unmarked for strategy globally",
    ),
    MarkerSet(
        slug="starred-festival-mapped-listings",
        collection=Collection.STARRED_FESTIVAL_MAPPED,
        response_key="mappedListings",
        event_prefix="starred-festival-mapped",
        added_message="Starred festival marked as mapped globally",
        removed_message="Starred festival unmarked as mapped globally",
    ),
    MarkerSet(
        slug="starred-festival-strategy-listings",
        collection=Collection.STARRED_FESTIVAL_STRATEGY,
        response_key="strategyListings",
        event_prefix="starred-festival-strategy",
        added_message="Starred festival marked for strategy globally",
        removed_message="Starred festival unmarked for strategy globally",
    ),
)

GLOBAL_DATE_MARKERS: tuple[MarkerSet, ...] = (
    MarkerSet(
        slug="verification-strategy-dates",
        collection=Collection.GLOBAL_VERIFICATION_STRATEGY_DATES,
        kind="date",
        response_key="strategyDates",
        event_prefix="global-verification-strategy-date",
        added_message="Strategy date saved globally",
        removed_message="Strategy date removed globally",
    ),
    MarkerSet(
        slug="starred-festival-strategy-dates",
        collection=Collection.STARRED_FESTIVAL_STRATEGY_DATES,
        kind="date",
        response_key="strategyDates",
        event_prefix="starred-festival-strategy-date",
        added_message="Starred festival strategy date set globally",
        removed_message="Starred festival strategy date removed globally",
    ),
)


class ChangeEvent(BaseModel):
    """Notification pushed to real-time clients."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    room: str = GLOBAL_ROOM

    def to_message(self) -> dict[str, Any]:
        return {"event": self.name, "data": self.data}


__all__ = [
    "GLOBAL_DATE_MARKERS",
    "GLOBAL_FLAG_MARKERS",
    "GLOBAL_OWNER",
    "GLOBAL_ROOM",
    "USER_DATE_MARKERS",
    "USER_FLAG_MARKERS",
    "AnnotationKey",
    "AnnotationRecord",
    "ChangeEvent",
    "Collection",
    "MarkerSet",
    "user_room",
]
