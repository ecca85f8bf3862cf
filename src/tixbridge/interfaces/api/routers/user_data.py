"""Per-user annotation endpoints under /api/user.

Every route resolves the caller from the ``x-username`` header.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body

from tixbridge.domain.value_objects import USER_DATE_MARKERS, USER_FLAG_MARKERS, MarkerSet
from tixbridge.interfaces.api.dependencies import Container, CurrentUser
from tixbridge.interfaces.api.schemas import (
    AutopricedRequest,
    BookmarkRequest,
    BulkTagRequest,
    LinkRequest,
    ManualCategoryRequest,
    TagRequest,
    parse_date_field,
)

router = APIRouter(prefix="/api/user", tags=["user"])


# === Bookmarks ===


@router.get("/bookmarks")
async def list_bookmarks(container: Container, user: CurrentUser) -> dict[str, Any]:
    return {"bookmarks": await container.annotations.list_bookmarks(user.id)}


@router.post("/bookmarks")
async def add_bookmark(
    body: BookmarkRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    success = await container.annotations.add_bookmark(user.id, body.event_id)
    return {"success": success, "message": "Bookmark added" if success else "Already bookmarked"}


@router.delete("/bookmarks/{event_id}")
async def remove_bookmark(event_id: str, container: Container, user: CurrentUser) -> dict[str, Any]:
    success = await container.annotations.remove_bookmark(user.id, event_id)
    return {
        "success": success,
        "message": "Bookmark removed" if success else "Bookmark not found",
    }


# === Custom links ===


@router.get("/marketplace-links/{event_id}")
async def get_marketplace_links(
    event_id: str, container: Container, user: CurrentUser
) -> dict[str, Any]:
    return {"links": await container.annotations.get_marketplace_links(user.id, event_id)}


@router.post("/marketplace-links/{event_id}")
async def set_marketplace_link(
    event_id: str, body: LinkRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    await container.annotations.set_marketplace_link(
        user.id, event_id, body.marketplace_type, body.link
    )
    return {"success": True, "message": "Marketplace link saved"}


@router.get("/listing-links/{listing_id}")
async def get_listing_links(
    listing_id: str, container: Container, user: CurrentUser
) -> dict[str, Any]:
    return {"links": await container.annotations.get_listing_links(user.id, listing_id)}


@router.post("/listing-links/{listing_id}")
async def set_listing_link(
    listing_id: str, body: LinkRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    await container.annotations.set_listing_link(
        user.id, listing_id, body.marketplace_type, body.link
    )
    return {"success": True, "message": "Listing link saved"}


# === Manual categories ===


@router.get("/manual-categories")
async def get_manual_categories(container: Container, user: CurrentUser) -> dict[str, Any]:
    return {"categories": await container.annotations.get_manual_categories(user.id)}


@router.post("/manual-categories")
async def set_manual_category(
    body: ManualCategoryRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    await container.annotations.set_manual_category(user.id, body.section, body.category)
    return {"success": True, "message": "Manual category saved"}


@router.delete("/manual-categories/{section}")
async def delete_manual_category(
    section: str, container: Container, user: CurrentUser
) -> dict[str, Any]:
    success = await container.annotations.delete_manual_category(user.id, section)
    return {"success": success, "message": "Manual category deleted"}


# === Autopriced listings ===


@router.get("/autopriced-listings")
async def get_autopriced_listings(container: Container, user: CurrentUser) -> dict[str, Any]:
    return {"listings": await container.annotations.get_autopriced_listings(user.id)}


@router.post("/autopriced-listings/{listing_id}")
async def set_autopriced(
    listing_id: str, body: AutopricedRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    await container.annotations.set_autopriced(user.id, listing_id, body.is_autopriced)
    return {"success": True, "message": "Autopriced status saved"}


# === Listing tags ===


@router.get("/listing-tags")
async def get_listing_tags(container: Container, user: CurrentUser) -> dict[str, Any]:
    return {"tags": await container.annotations.get_listing_tags(user.id)}


# Registered before /listing-tags/{listing_id} so "bulk" is not taken as an id
@router.post("/listing-tags/bulk")
async def add_bulk_listing_tags(
    body: BulkTagRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    inserted = await container.annotations.add_bulk_listing_tags(
        user.id, body.listing_ids, body.tag
    )
    return {
        "success": True,
        "message": f"Tag added to {len(body.listing_ids)} listings",
        "inserted": inserted,
    }


@router.post("/listing-tags/{listing_id}")
async def add_listing_tag(
    listing_id: str, body: TagRequest, container: Container, user: CurrentUser
) -> dict[str, Any]:
    added = await container.annotations.add_listing_tag(user.id, listing_id, body.tag)
    return {"success": True, "message": "Tag added" if added else "Tag already present"}


@router.delete("/listing-tags/{listing_id}/{tag:path}")
async def remove_listing_tag(
    listing_id: str, tag: str, container: Container, user: CurrentUser
) -> dict[str, Any]:
    removed = await container.annotations.remove_listing_tag(user.id, listing_id, tag)
    return {"success": True, "message": "Tag removed" if removed else "Tag not found"}


# === Marker sets ===


def _add_flag_routes(marker: MarkerSet) -> None:
    path = f"/{marker.slug}"

    async def list_flags(container: Container, user: CurrentUser) -> dict[str, Any]:
        listings = await container.markers.list_flags(marker, owner_id=user.id)
        return marker.list_response(listings)

    async def add_flag(listing_id: str, container: Container, user: CurrentUser) -> dict[str, Any]:
        await container.markers.add_flag(marker, listing_id, owner_id=user.id)
        return {"success": True, "message": marker.added_message}

    async def remove_flag(
        listing_id: str, container: Container, user: CurrentUser
    ) -> dict[str, Any]:
        await container.markers.remove_flag(marker, listing_id, owner_id=user.id)
        return {"success": True, "message": marker.removed_message}

    router.add_api_route(path, list_flags, methods=["GET"], name=f"list_{marker.slug}")
    router.add_api_route(
        f"{path}/{{listing_id}}", add_flag, methods=["POST"], name=f"add_{marker.slug}"
    )
    router.add_api_route(
        f"{path}/{{listing_id}}", remove_flag, methods=["DELETE"], name=f"remove_{marker.slug}"
    )


def _add_date_routes(marker: MarkerSet) -> None:
    path = f"/{marker.slug}"

    async def list_dates(container: Container, user: CurrentUser) -> dict[str, Any]:
        dates = await container.markers.list_dates(marker, owner_id=user.id)
        return marker.list_response(dates)

    async def set_date(
        listing_id: str,
        body: Annotated[dict[str, Any], Body()],
        container: Container,
        user: CurrentUser,
    ) -> dict[str, Any]:
        when = parse_date_field(body, marker.date_field)
        await container.markers.set_date(marker, listing_id, when, owner_id=user.id)
        return {"success": True, "message": marker.added_message}

    async def remove_date(
        listing_id: str, container: Container, user: CurrentUser
    ) -> dict[str, Any]:
        await container.markers.remove_date(marker, listing_id, owner_id=user.id)
        return {"success": True, "message": marker.removed_message}

    router.add_api_route(path, list_dates, methods=["GET"], name=f"list_{marker.slug}")
    router.add_api_route(
        f"{path}/{{listing_id}}", set_date, methods=["POST"], name=f"set_{marker.slug}"
    )
    router.add_api_route(
        f"{path}/{{listing_id}}", remove_date, methods=["DELETE"], name=f"remove_{marker.slug}"
    )


for _marker in USER_FLAG_MARKERS:
    _add_flag_routes(_marker)

for _marker in USER_DATE_MARKERS:
    _add_date_routes(_marker)
