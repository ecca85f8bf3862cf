"""Resilience infrastructure for vendor API calls.

Implements call pacing (Governor) and rate-limit backoff.
"""

from tixbridge.infrastructure.resilience.backoff import RateLimitBackoff, create_vendor_backoff
from tixbridge.infrastructure.resilience.call_governor import (
    CallGovernor,
    QueuedCall,
    create_vendor_governor,
)

__all__ = [
    "CallGovernor",
    "QueuedCall",
    "RateLimitBackoff",
    "create_vendor_backoff",
    "create_vendor_governor",
]
