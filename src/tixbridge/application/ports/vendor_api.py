"""Port interface for the ticket-marketplace vendor API.

Implementations live in adapters/external_apis/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VendorResponse:
    """Status code and decoded JSON body of a vendor API response."""

    status_code: int
    data: Any


class VendorAPIPort(ABC):
    """Port interface for vendor API access.

    Implementations must:
    - Inject the vendor credentials into every request
    - Route every request through the shared call governor
    - Raise RateLimitedError on HTTP 429 and UpstreamError on other failures
    """

    @abstractmethod
    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
    ) -> VendorResponse:
        """Issue one vendor API request.

        Args:
            method: HTTP method
            path: Path relative to the vendor base URL (e.g. "/v1/events")
            params: Query parameters, forwarded verbatim
            json: JSON request body

        Returns:
            VendorResponse with the upstream status and body

        Raises:
            RateLimitedError: Upstream answered 429
            UpstreamError: Any other upstream or transport failure
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources."""
        ...


__all__ = ["VendorAPIPort", "VendorResponse"]
