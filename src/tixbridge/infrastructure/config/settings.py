"""Application settings using Pydantic Settings.

Configuration loaded from environment variables and .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """tixbridge application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TIXBRIDGE_",
        extra="ignore",
    )

    # === Application ===
    app_name: str = "tixbridge"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # === HTTP Server ===
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:3002",
        "http://localhost:3010",
    ]

    # === Inbound Rate Limiting (per client, /api routes) ===
    rate_limit_enabled: bool = True
    rate_limit_per_second: str = "1000/second"  # all methods combined
    rate_limit_per_minute: str = "2000/minute"  # each of GET, POST and PATCH

    # === Vendor API ===
    vendor_api_key: SecretStr = Field(default=...)
    vendor_base_url: str = "https://api.zerohero.com"
    vendor_timeout: float = 10.0  # seconds

    # === Outbound Call Governor ===
    governor_min_interval: float = 0.5  # seconds between dispatched calls

    # === Rate-limit Backoff ===
    backoff_base_delay: float = 1.0  # seconds
    backoff_multiplier: float = 2.0
    backoff_max_delay: float = 10.0  # seconds
    backoff_reset_window: float = 60.0  # seconds

    # === Database ===
    database_url: str = "sqlite+aiosqlite:///./tixbridge.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
