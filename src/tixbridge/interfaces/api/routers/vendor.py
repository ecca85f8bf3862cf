"""Vendor API proxy endpoints.

Query strings are forwarded verbatim and responses mirror the upstream
status code and JSON body. Upstream replies without a body (204, 304)
are passed on without one.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, Request, Response
from fastapi.responses import JSONResponse

from tixbridge.application.ports import VendorResponse
from tixbridge.interfaces.api.dependencies import Container
from tixbridge.interfaces.api.schemas import ListingTagsUpdateRequest

router = APIRouter(prefix="/api", tags=["vendor"])


def _query(request: Request) -> list[tuple[str, str]]:
    return list(request.query_params.multi_items())


_EMPTY_STATUSES = frozenset({204, 304})


def _mirror(response: VendorResponse) -> Response:
    if response.status_code in _EMPTY_STATUSES or response.data is None:
        return Response(status_code=response.status_code)
    return JSONResponse(status_code=response.status_code, content=response.data)


@router.get("/v1/events")
async def get_events(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_events(_query(request)))


@router.get("/v1/listings")
async def get_listings(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_listings(_query(request)))


@router.post("/v1/listings")
async def create_listing(
    container: Container, payload: Annotated[Any, Body()] = None
) -> Response:
    return _mirror(await container.vendor.create_listing(payload))


@router.put("/v1/listings/{listing_id}/tags")
async def update_listing_tags(
    listing_id: str, body: ListingTagsUpdateRequest, container: Container
) -> Response:
    response = await container.vendor.update_listing_tags(
        listing_id, body.tags, replace_tags=body.replace_tags
    )
    return _mirror(response)


@router.get("/v1/external/listings")
async def get_external_listings(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_external_listings(_query(request)))


@router.get("/zerohero/listings")
@router.get("/vendor/listings", include_in_schema=False)
async def get_verification_listings(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_verification_listings(_query(request)))


@router.get("/v1/orders/sales")
async def get_sales_orders(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_sales_orders(_query(request)))


@router.get("/v1/orders/purchase")
async def get_purchase_orders(request: Request, container: Container) -> Response:
    return _mirror(await container.vendor.get_purchase_orders(_query(request)))


@router.get("/v1/batch/event-data")
async def get_batch_event_data(
    container: Container,
    event_ids: Annotated[str | None, Query(alias="eventIds")] = None,
) -> dict[str, Any]:
    return await container.vendor.get_batch_event_data(event_ids)
