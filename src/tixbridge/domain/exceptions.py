"""Domain exceptions for tixbridge.

All business logic exceptions inherit from TixBridgeError.
"""

from typing import Any


class TixBridgeError(Exception):
    """Base exception for all tixbridge errors."""

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# === Upstream (vendor API) Errors ===


class UpstreamError(TixBridgeError):
    """Vendor API call failed (timeout, connection error, non-2xx status)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, details)


class RateLimitedError(UpstreamError):
    """Vendor API rejected the call with HTTP 429."""

    def __init__(self, retry_after: int | None = None, details: Any = None) -> None:
        self.retry_after = retry_after
        super().__init__(
            message="Rate limit exceeded. Please try again in a few moments.",
            status_code=429,
            details=details,
        )


# === Storage Errors ===


class StorageError(TixBridgeError):
    """Annotation or user store operation failed."""


class UserAlreadyExistsError(StorageError):
    """A user with this email already exists."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User already exists: {email}")


# === Request Errors ===


class InvalidRequestError(TixBridgeError):
    """Request payload failed validation."""


class NotFoundError(TixBridgeError):
    """Requested record does not exist."""


# === Authentication / Authorization Errors ===


class AuthenticationError(TixBridgeError):
    """Caller could not be identified."""


class PermissionDeniedError(TixBridgeError):
    """Caller is identified but lacks permission for the operation."""
