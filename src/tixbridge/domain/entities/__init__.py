"""Domain entities for tixbridge."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class User(BaseModel):
    """Dashboard user.

    The password hash never leaves the service; use ``to_public()`` for any
    outward-facing representation.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque user identifier")
    email: str = Field(..., min_length=3, description="Login email, unique")
    password_hash: str = Field(..., repr=False, description="bcrypt hash")
    is_admin: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_login: datetime | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Strip surrounding whitespace from the email."""
        return v.strip()

    def to_public(self) -> dict:
        """Representation safe to return to clients."""
        return {
            "id": self.id,
            "email": self.email,
            "isAdmin": self.is_admin,
            "createdAt": self.created_at.isoformat(),
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }


__all__ = ["User"]
