"""Ticket-marketplace vendor API client adapter.

Implements VendorAPIPort. Every request, read or write, is handed to the
shared CallGovernor as a thunk, so all routes share one pacing lane.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from tixbridge import __version__
from tixbridge.application.ports import VendorAPIPort, VendorResponse
from tixbridge.domain.exceptions import RateLimitedError, UpstreamError

if TYPE_CHECKING:
    from tixbridge.infrastructure.config import Settings
    from tixbridge.infrastructure.resilience import CallGovernor

logger = structlog.get_logger(__name__)


def _decode_body(response: httpx.Response) -> Any:
    """Return the JSON body, falling back to text for non-JSON payloads."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


class VendorClient(VendorAPIPort):
    """Vendor REST API client.

    Features:
    - Async HTTP with httpx
    - Broker-Key and Bearer credentials injected on every request
    - All calls serialized and paced by the CallGovernor
    """

    def __init__(
        self,
        settings: Settings,
        governor: CallGovernor,
        *,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize vendor client.

        Args:
            settings: Application settings with vendor configuration
            governor: Shared call governor
            client: Optional pre-configured httpx client (for testing)
        """
        self._base_url = settings.vendor_base_url.rstrip("/")
        self._api_key = settings.vendor_api_key.get_secret_value()
        self._governor = governor

        self._timeout = httpx.Timeout(settings.vendor_timeout)
        self._external_client = client
        self._owned_client: httpx.AsyncClient | None = None

        logger.info("vendor_client_initialized", base_url=self._base_url)

    @property
    def auth_headers(self) -> dict[str, str]:
        return {
            "Broker-Key": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._external_client:
            return self._external_client

        if self._owned_client is None:
            self._owned_client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={
                    "User-Agent": f"tixbridge/{__version__}",
                    "Accept": "application/json",
                },
            )

        return self._owned_client

    async def close(self) -> None:
        """Close HTTP client if owned."""
        if self._owned_client:
            await self._owned_client.aclose()
            self._owned_client = None

    async def _send(
        self,
        method: str,
        url: str,
        params: Any,
        json: Any,
    ) -> httpx.Response:
        """Perform the HTTP exchange. Runs inside the governor's drain task."""
        client = await self._get_client()
        response = await client.request(
            method,
            url,
            params=params,
            json=json,
            headers=self.auth_headers,
        )
        response.raise_for_status()
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
    ) -> VendorResponse:
        """Issue one vendor API request through the governor.

        Args:
            method: HTTP method
            path: Path relative to the vendor base URL
            params: Query parameters
            json: JSON body

        Returns:
            VendorResponse with upstream status and decoded body

        Raises:
            RateLimitedError: Upstream answered 429
            UpstreamError: Timeout, connection failure or other non-2xx status
        """
        method = method.upper()
        url = f"{self._base_url}{path}"

        logger.debug("vendor_request_queued", method=method, path=path)

        try:
            response = await self._governor.submit(
                lambda: self._send(method, url, params, json)
            )

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            details = _decode_body(e.response)
            if status == 429:
                logger.warning("vendor_rate_limited", method=method, path=path)
                raise RateLimitedError(details=details) from e
            logger.error(
                "vendor_http_error",
                method=method,
                path=path,
                status_code=status,
            )
            raise UpstreamError(
                f"Vendor API error {status} for {method} {path}",
                status_code=status,
                details=details,
            ) from e

        except httpx.TimeoutException as e:
            logger.error("vendor_timeout", method=method, path=path, error=str(e))
            raise UpstreamError(f"Vendor API timeout for {method} {path}") from e

        except httpx.HTTPError as e:
            logger.error("vendor_transport_error", method=method, path=path, error=str(e))
            raise UpstreamError(f"Vendor API unreachable for {method} {path}: {e}") from e

        logger.info(
            "vendor_response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return VendorResponse(status_code=response.status_code, data=_decode_body(response))


__all__ = ["VendorClient"]
