"""Shared marker endpoints under /api/global. No authentication."""

from typing import Annotated, Any

from fastapi import APIRouter, Body

from tixbridge.domain.value_objects import GLOBAL_DATE_MARKERS, GLOBAL_FLAG_MARKERS, MarkerSet
from tixbridge.interfaces.api.dependencies import Container
from tixbridge.interfaces.api.schemas import parse_date_field

router = APIRouter(prefix="/api/global", tags=["global"])


def _add_flag_routes(marker: MarkerSet) -> None:
    path = f"/{marker.slug}"

    async def list_flags(container: Container) -> dict[str, Any]:
        return marker.list_response(await container.markers.list_flags(marker))

    async def add_flag(listing_id: str, container: Container) -> dict[str, Any]:
        await container.markers.add_flag(marker, listing_id)
        return {"success": True, "message": marker.added_message}

    async def remove_flag(listing_id: str, container: Container) -> dict[str, Any]:
        await container.markers.remove_flag(marker, listing_id)
        return {"success": True, "message": marker.removed_message}

    router.add_api_route(path, list_flags, methods=["GET"], name=f"list_global_{marker.slug}")
    router.add_api_route(
        f"{path}/{{listing_id}}", add_flag, methods=["POST"], name=f"add_global_{marker.slug}"
    )
    router.add_api_route(
        f"{path}/{{listing_id}}",
        remove_flag,
        methods=["DELETE"],
        name=f"remove_global_{marker.slug}",
    )


def _add_date_routes(marker: MarkerSet) -> None:
    path = f"/{marker.slug}"

    async def list_dates(container: Container) -> dict[str, Any]:
        return marker.list_response(await container.markers.list_dates(marker))

    async def set_date(
        listing_id: str,
        body: Annotated[dict[str, Any], Body()],
        container: Container,
    ) -> dict[str, Any]:
        when = parse_date_field(body, marker.date_field)
        await container.markers.set_date(marker, listing_id, when)
        return {"success": True, "message": marker.added_message}

    async def remove_date(listing_id: str, container: Container) -> dict[str, Any]:
        await container.markers.remove_date(marker, listing_id)
        return {"success": True, "message": marker.removed_message}

    router.add_api_route(path, list_dates, methods=["GET"], name=f"list_global_{marker.slug}")
    router.add_api_route(
        f"{path}/{{listing_id}}", set_date, methods=["POST"], name=f"set_global_{marker.slug}"
    )
    router.add_api_route(
        f"{path}/{{listing_id}}",
        remove_date,
        methods=["DELETE"],
        name=f"remove_global_{marker.slug}",
    )


for _marker in GLOBAL_FLAG_MARKERS:
    _add_flag_routes(_marker)

for _marker in GLOBAL_DATE_MARKERS:
    _add_date_routes(_marker)
