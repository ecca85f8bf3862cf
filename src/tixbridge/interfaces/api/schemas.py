"""Request bodies for the HTTP API.

Field names follow the dashboard's camelCase wire format through aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter, ValidationError

from tixbridge.domain.exceptions import InvalidRequestError


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# === Auth / admin ===


class LoginRequest(_Body):
    email: str = ""
    password: str = ""


class CreateUserRequest(_Body):
    email: str = ""
    password: str = ""
    is_admin: bool = Field(default=False, alias="isAdmin")


class UpdateUserRequest(_Body):
    email: str | None = None
    is_admin: bool | None = Field(default=None, alias="isAdmin")


class PasswordRequest(_Body):
    password: str = ""


# === Per-user annotations ===


class BookmarkRequest(_Body):
    event_id: str = Field(default="", alias="eventId")


class LinkRequest(_Body):
    marketplace_type: str = Field(default="", alias="marketplaceType")
    link: str = ""


class ManualCategoryRequest(_Body):
    section: str = ""
    category: str = ""


class AutopricedRequest(_Body):
    is_autopriced: StrictBool = Field(..., alias="isAutopriced")


class TagRequest(_Body):
    tag: str = ""


class BulkTagRequest(_Body):
    listing_ids: list[str] = Field(default_factory=list, alias="listingIds")
    tag: str = ""


# === Vendor proxy ===


class ListingTagsUpdateRequest(_Body):
    tags: list[str]
    replace_tags: bool = Field(default=False, alias="replaceTags")


_datetime_adapter = TypeAdapter(datetime)


def parse_date_field(body: dict[str, Any], field: str) -> datetime:
    """Read and validate a date marker from a JSON body.

    Raises:
        InvalidRequestError: If the field is missing or not a valid date
    """
    raw = body.get(field)
    if raw in (None, ""):
        msg = f"{field} required"
        raise InvalidRequestError(msg)
    try:
        return _datetime_adapter.validate_python(raw)
    except ValidationError as e:
        msg = f"{field} must be an ISO-8601 date"
        raise InvalidRequestError(msg, details=str(e)) from e


__all__ = [
    "AutopricedRequest",
    "BookmarkRequest",
    "BulkTagRequest",
    "CreateUserRequest",
    "LinkRequest",
    "ListingTagsUpdateRequest",
    "LoginRequest",
    "ManualCategoryRequest",
    "PasswordRequest",
    "TagRequest",
    "UpdateUserRequest",
    "parse_date_field",
]
