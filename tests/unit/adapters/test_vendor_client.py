"""Tests for the vendor API client adapter."""

import json

import httpx
import pytest

from tixbridge.adapters.external_apis import VendorClient
from tixbridge.domain.exceptions import RateLimitedError, UpstreamError
from tixbridge.infrastructure.config import Settings
from tixbridge.infrastructure.resilience import CallGovernor


@pytest.fixture
def settings() -> Settings:
    return Settings(vendor_api_key="broker-key", vendor_base_url="https://vendor.test/")


@pytest.fixture
def governor() -> CallGovernor:
    return CallGovernor("vendor_test", min_interval=0.0)


def make_client(settings: Settings, governor: CallGovernor, handler) -> VendorClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return VendorClient(settings, governor, client=http_client)


class TestVendorClientRequests:
    """Request construction."""

    @pytest.mark.asyncio
    async def test_injects_credentials(self, settings: Settings, governor: CallGovernor) -> None:
        """Test both credential headers are sent on every request."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"resultData": []})

        client = make_client(settings, governor, handler)
        await client.request("GET", "/v1/events")

        assert seen[0].headers["Broker-Key"] == "broker-key"
        assert seen[0].headers["Authorization"] == "Bearer broker-key"
        assert str(seen[0].url) == "https://vendor.test/v1/events"

    @pytest.mark.asyncio
    async def test_forwards_query_and_body(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test params and JSON bodies reach the vendor unchanged."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"id": "L1"})

        client = make_client(settings, governor, handler)
        await client.request("GET", "/v1/listings", params=[("eventId", "E1"), ("page", "2")])
        response = await client.request(
            "post", "/v1/listings", json={"eventId": "E1", "quantity": 2}
        )

        assert seen[0].url.params["eventId"] == "E1"
        assert seen[0].url.params["page"] == "2"
        assert seen[1].method == "POST"
        assert json.loads(seen[1].content) == {"eventId": "E1", "quantity": 2}
        assert response.status_code == 201
        assert response.data == {"id": "L1"}

    @pytest.mark.asyncio
    async def test_every_call_goes_through_governor(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test reads and writes are both dispatched by the governor."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        client = make_client(settings, governor, handler)
        await client.request("GET", "/v1/events")
        await client.request("PUT", "/v1/listings/L1", json={"tags": ["vip"]})

        assert governor.get_stats()["dispatched"] == 2

    @pytest.mark.asyncio
    async def test_non_json_body_returned_as_text(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="pong")

        client = make_client(settings, governor, handler)
        response = await client.request("GET", "/v1/ping")

        assert response.data == "pong"


class TestVendorClientErrors:
    """Error mapping."""

    @pytest.mark.asyncio
    async def test_429_raises_rate_limited(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test HTTP 429 becomes RateLimitedError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"message": "slow down"})

        client = make_client(settings, governor, handler)

        with pytest.raises(RateLimitedError) as exc_info:
            await client.request("GET", "/v1/events")

        assert exc_info.value.status_code == 429
        assert exc_info.value.details == {"message": "slow down"}

    @pytest.mark.asyncio
    async def test_http_error_keeps_status_and_body(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test non-2xx responses raise UpstreamError with the upstream status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "no such listing"})

        client = make_client(settings, governor, handler)

        with pytest.raises(UpstreamError) as exc_info:
            await client.request("GET", "/v1/listings/404")

        assert not isinstance(exc_info.value, RateLimitedError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"error": "no such listing"}

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_without_status(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(settings, governor, handler)

        with pytest.raises(UpstreamError) as exc_info:
            await client.request("GET", "/v1/events")

        assert exc_info.value.status_code is None
        assert "timeout" in exc_info.value.message.lower()

    @pytest.mark.asyncio
    async def test_connection_error_raises_upstream(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = make_client(settings, governor, handler)

        with pytest.raises(UpstreamError) as exc_info:
            await client.request("GET", "/v1/events")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_failure_does_not_block_next_call(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test the governor keeps draining after a failed request."""
        statuses = iter([500, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), json={})

        client = make_client(settings, governor, handler)

        with pytest.raises(UpstreamError):
            await client.request("GET", "/v1/events")
        response = await client.request("GET", "/v1/events")

        assert response.status_code == 200


class TestVendorClientLifecycle:
    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(
        self, settings: Settings, governor: CallGovernor
    ) -> None:
        """Test close() only closes clients the adapter created."""
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200))
        )
        client = VendorClient(settings, governor, client=http_client)

        await client.close()

        assert http_client.is_closed is False
        await http_client.aclose()

    def test_auth_headers(self, settings: Settings, governor: CallGovernor) -> None:
        client = VendorClient(settings, governor)

        assert client.auth_headers == {
            "Broker-Key": "broker-key",
            "Authorization": "Bearer broker-key",
        }
