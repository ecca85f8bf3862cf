"""Unit tests for settings configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tixbridge.infrastructure.config.settings import Settings, get_settings

# === Basic Settings Tests ===


def test_settings_defaults():
    """Test Settings with default values."""
    # Arrange & Act
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "test-key"}, clear=True):
        settings = Settings()

    # Assert
    assert settings.app_name == "tixbridge"
    assert settings.environment == "development"
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.port == 3001


def test_settings_from_env():
    """Test Settings loads from environment variables with TIXBRIDGE_ prefix."""
    # Arrange
    env_vars = {
        "TIXBRIDGE_VENDOR_API_KEY": "broker-key-123",
        "TIXBRIDGE_APP_NAME": "tixbridge-staging",
        "TIXBRIDGE_ENVIRONMENT": "production",
        "TIXBRIDGE_DEBUG": "true",
        "TIXBRIDGE_LOG_LEVEL": "DEBUG",
        "TIXBRIDGE_PORT": "8080",
    }

    # Act
    with patch.dict(os.environ, env_vars, clear=True):
        settings = Settings()

    # Assert
    assert settings.app_name == "tixbridge-staging"
    assert settings.environment == "production"
    assert settings.debug is True
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080
    assert settings.vendor_api_key.get_secret_value() == "broker-key-123"


def test_settings_inbound_rate_limits():
    """Test inbound limit defaults and env overrides."""
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "test-key"}, clear=True):
        defaults = Settings()
    env_vars = {
        "TIXBRIDGE_VENDOR_API_KEY": "test-key",
        "TIXBRIDGE_RATE_LIMIT_ENABLED": "false",
        "TIXBRIDGE_RATE_LIMIT_PER_MINUTE": "100/minute",
    }
    with patch.dict(os.environ, env_vars, clear=True):
        overridden = Settings()

    assert defaults.rate_limit_enabled is True
    assert defaults.rate_limit_per_second == "1000/second"
    assert defaults.rate_limit_per_minute == "2000/minute"
    assert overridden.rate_limit_enabled is False
    assert overridden.rate_limit_per_minute == "100/minute"


def test_settings_vendor_api_key_required():
    """Test Settings requires vendor_api_key."""
    # Arrange & Act & Assert
    with patch.dict(os.environ, {}, clear=True), pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "vendor_api_key" in str(exc_info.value)


def test_settings_vendor_api_key_is_secret():
    """Test the vendor key is not exposed in repr."""
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "super-secret"}, clear=True):
        settings = Settings()

    assert "super-secret" not in repr(settings)


def test_settings_invalid_environment():
    """Test Settings rejects unknown environments."""
    env_vars = {"TIXBRIDGE_VENDOR_API_KEY": "k", "TIXBRIDGE_ENVIRONMENT": "qa"}

    with patch.dict(os.environ, env_vars, clear=True), pytest.raises(ValidationError):
        Settings()


# === Vendor / Governor Tests ===


def test_settings_vendor_defaults():
    """Test vendor API default configuration."""
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "k"}, clear=True):
        settings = Settings()

    assert settings.vendor_base_url == "https://api.zerohero.com"
    assert settings.vendor_timeout == 10.0


def test_settings_governor_policy_defaults():
    """Test pacing and backoff defaults."""
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "k"}, clear=True):
        settings = Settings()

    assert settings.governor_min_interval == 0.5
    assert settings.backoff_base_delay == 1.0
    assert settings.backoff_multiplier == 2.0
    assert settings.backoff_max_delay == 10.0
    assert settings.backoff_reset_window == 60.0


def test_settings_governor_policy_from_env():
    """Test pacing policy can be tuned from the environment."""
    env_vars = {
        "TIXBRIDGE_VENDOR_API_KEY": "k",
        "TIXBRIDGE_GOVERNOR_MIN_INTERVAL": "1.5",
        "TIXBRIDGE_BACKOFF_MAX_DELAY": "30",
    }

    with patch.dict(os.environ, env_vars, clear=True):
        settings = Settings()

    assert settings.governor_min_interval == 1.5
    assert settings.backoff_max_delay == 30.0


# === Database / CORS Tests ===


def test_settings_database_default():
    with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "k"}, clear=True):
        settings = Settings()

    assert settings.database_url == "sqlite+aiosqlite:///./tixbridge.db"


def test_settings_cors_origins_from_env():
    """Test list settings parse from JSON in the environment."""
    env_vars = {
        "TIXBRIDGE_VENDOR_API_KEY": "k",
        "TIXBRIDGE_CORS_ORIGINS": '["https://dashboard.example.com"]',
    }

    with patch.dict(os.environ, env_vars, clear=True):
        settings = Settings()

    assert settings.cors_origins == ["https://dashboard.example.com"]


# === get_settings() Tests ===


def test_get_settings_is_cached():
    """Test get_settings returns the same instance."""
    get_settings.cache_clear()
    try:
        with patch.dict(os.environ, {"TIXBRIDGE_VENDOR_API_KEY": "k"}, clear=True):
            first = get_settings()
            second = get_settings()
    finally:
        get_settings.cache_clear()

    assert first is second
