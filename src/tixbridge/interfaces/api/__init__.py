"""HTTP API (FastAPI)."""

from tixbridge.interfaces.api.app import create_app

__all__ = ["create_app"]
