"""Real-time fan-out adapters."""

from tixbridge.adapters.realtime.connection_manager import ConnectionManager

__all__ = ["ConnectionManager"]
