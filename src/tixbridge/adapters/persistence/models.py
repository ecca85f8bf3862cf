"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(UTC)


def generate_user_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all database models."""


class TimestampMixin:
    """Mixin to add timestamp fields to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class UserRow(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_user_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AnnotationRow(Base, TimestampMixin):
    """One record of a logical annotation collection."""

    __tablename__ = "annotations"
    __table_args__ = (
        UniqueConstraint(
            "collection", "owner_id", "subject_id", "qualifier", name="uq_annotation_key"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    owner_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False, default="")
    subject_id: Mapped[str] = mapped_column(String(255), nullable=False)
    qualifier: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    value: Mapped[Any] = mapped_column(JSON, nullable=True)


__all__ = ["AnnotationRow", "Base", "UserRow", "generate_user_id"]
