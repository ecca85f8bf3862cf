"""Application ports (interfaces) for tixbridge.

Ports define contracts that adapters must implement.
Following hexagonal architecture (Ports & Adapters pattern).
"""

from tixbridge.application.ports.broadcaster import BroadcasterPort
from tixbridge.application.ports.stores import AnnotationStorePort, UserStorePort
from tixbridge.application.ports.vendor_api import VendorAPIPort, VendorResponse

__all__ = [
    # Persistence
    "AnnotationStorePort",
    "UserStorePort",
    # Real-time
    "BroadcasterPort",
    # Vendor API
    "VendorAPIPort",
    "VendorResponse",
]
