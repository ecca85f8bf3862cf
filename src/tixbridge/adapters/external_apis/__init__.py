"""External API adapters for tixbridge."""

from tixbridge.adapters.external_apis.vendor_client import VendorClient

__all__ = ["VendorClient"]
