"""Configuration for tixbridge."""

from tixbridge.infrastructure.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
