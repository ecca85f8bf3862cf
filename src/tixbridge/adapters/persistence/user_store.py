"""SQLAlchemy user store adapter."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from tixbridge.adapters.persistence.models import UserRow
from tixbridge.application.ports import UserStorePort
from tixbridge.domain.entities import User
from tixbridge.domain.exceptions import UserAlreadyExistsError

if TYPE_CHECKING:
    from tixbridge.adapters.persistence.database import Database

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = frozenset({"email", "is_admin", "password_hash", "last_login"})


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        is_admin=row.is_admin,
        created_at=_as_utc(row.created_at),
        last_login=_as_utc(row.last_login),
    )


class SQLAlchemyUserStore(UserStorePort):
    """User accounts backed by SQLAlchemy asyncio."""

    def __init__(self, database: Database):
        self._db = database

    async def create(self, email: str, password_hash: str, *, is_admin: bool = False) -> User:
        row = UserRow(email=email.strip(), password_hash=password_hash, is_admin=is_admin)
        async with self._db.session() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise UserAlreadyExistsError(email) from e
        logger.info("user_created", user_id=row.id, is_admin=is_admin)
        return _to_user(row)

    async def get_by_id(self, user_id: str) -> User | None:
        async with self._db.session() as session:
            row = await session.get(UserRow, user_id)
        return _to_user(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        async with self._db.session() as session:
            row = await session.scalar(select(UserRow).where(UserRow.email == email.strip()))
        return _to_user(row) if row else None

    async def list_all(self) -> list[User]:
        async with self._db.session() as session:
            rows = (await session.scalars(select(UserRow).order_by(UserRow.created_at))).all()
        return [_to_user(row) for row in rows]

    async def update(self, user_id: str, **fields: Any) -> User | None:
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            msg = f"Cannot update user fields: {sorted(unknown)}"
            raise ValueError(msg)

        async with self._db.session() as session:
            row = await session.get(UserRow, user_id)
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise UserAlreadyExistsError(str(fields.get("email"))) from e
        return _to_user(row)

    async def delete(self, user_id: str) -> bool:
        async with self._db.session() as session:
            result = await session.execute(delete(UserRow).where(UserRow.id == user_id))
            await session.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.info("user_deleted", user_id=user_id)
        return deleted


__all__ = ["SQLAlchemyUserStore"]
