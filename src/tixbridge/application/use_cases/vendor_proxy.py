"""Vendor proxy use case.

Forwards dashboard reads and writes to the vendor API. Every call goes
through the injected client, which paces it through the call governor.
When the vendor answers 429 the caller pays the escalating backoff delay
before the error is surfaced with a ``retry_after`` hint; nothing is
retried automatically.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from tixbridge.domain.exceptions import InvalidRequestError, RateLimitedError

if TYPE_CHECKING:
    from tixbridge.application.ports import VendorAPIPort, VendorResponse
    from tixbridge.infrastructure.resilience import RateLimitBackoff

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class VendorProxyUseCase:
    """Pass-through access to the vendor REST API."""

    def __init__(self, client: VendorAPIPort, backoff: RateLimitBackoff) -> None:
        self._client = client
        self._backoff = backoff

    async def _guard(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run a vendor call, converting a 429 into a paced, hinted error."""
        try:
            return await call()
        except RateLimitedError as e:
            delay = await self._backoff.strike()
            retry_after = self._backoff.retry_after
            logger.warning(
                "vendor_rate_limit_reported",
                operation=operation,
                delay=delay,
                retry_after=retry_after,
            )
            raise RateLimitedError(retry_after=retry_after, details=e.details) from e

    async def _get(self, operation: str, path: str, params: Any = None) -> VendorResponse:
        return await self._guard(operation, lambda: self._client.request("GET", path, params=params))

    async def get_events(self, params: Any = None) -> VendorResponse:
        return await self._get("get_events", "/v1/events", params)

    async def get_listings(self, params: Any = None) -> VendorResponse:
        return await self._get("get_listings", "/v1/listings", params)

    async def get_external_listings(self, params: Any = None) -> VendorResponse:
        return await self._get("get_external_listings", "/v1/listings", params)

    async def get_verification_listings(self, params: Any = None) -> VendorResponse:
        return await self._get("get_verification_listings", "/v1/listings", params)

    async def get_sales_orders(self, params: Any = None) -> VendorResponse:
        return await self._get("get_sales_orders", "/v1/orders/sales", params)

    async def get_purchase_orders(self, params: Any = None) -> VendorResponse:
        return await self._get("get_purchase_orders", "/v1/orders/purchase", params)

    async def create_listing(self, payload: Any) -> VendorResponse:
        return await self._guard(
            "create_listing",
            lambda: self._client.request("POST", "/v1/listings", json=payload),
        )

    async def update_listing_tags(
        self, listing_id: str, tags: list[str], replace_tags: bool = False
    ) -> VendorResponse:
        """Replace or extend the tags of one vendor listing."""
        body = {"tags": tags, "replaceTags": replace_tags}
        logger.info("listing_tags_update", listing_id=listing_id, tags=len(tags))
        return await self._guard(
            "update_listing_tags",
            lambda: self._client.request("PUT", f"/v1/listings/{listing_id}", json=body),
        )

    async def get_batch_event_data(self, event_ids: str | None) -> dict[str, Any]:
        """Fetch events, listings and sales for a set of events.

        The three calls are submitted together; the governor still
        dispatches them one at a time.

        Args:
            event_ids: Comma-separated vendor event ids

        Returns:
            Dict with ``events``, ``listings`` and ``sales`` upstream bodies

        Raises:
            InvalidRequestError: If no event ids were given
        """
        if not event_ids:
            msg = "eventIds parameter required"
            raise InvalidRequestError(msg)

        params = {"eventIds": event_ids}

        async def fan_out() -> list[VendorResponse]:
            return await asyncio.gather(
                self._client.request("GET", "/v1/events", params=params),
                self._client.request("GET", "/v1/listings", params=params),
                self._client.request("GET", "/v1/orders/sales", params=params),
            )

        events, listings, sales = await self._guard("get_batch_event_data", fan_out)
        logger.info("batch_event_data_fetched", event_ids=event_ids)
        return {"events": events.data, "listings": listings.data, "sales": sales.data}


__all__ = ["VendorProxyUseCase"]
