"""SQLAlchemy annotation store adapter.

Implements AnnotationStorePort on a single ``annotations`` table. The unique
constraint on the compound key is what makes ``insert_if_absent`` report
duplicates instead of storing them.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from tixbridge.adapters.persistence.models import AnnotationRow
from tixbridge.application.ports import AnnotationStorePort
from tixbridge.domain.exceptions import StorageError
from tixbridge.domain.value_objects import AnnotationKey, AnnotationRecord, Collection

if TYPE_CHECKING:
    from tixbridge.adapters.persistence.database import Database

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _key_clause(key: AnnotationKey) -> tuple:
    return (
        AnnotationRow.collection == key.collection.value,
        AnnotationRow.owner_id == key.owner_id,
        AnnotationRow.subject_id == key.subject_id,
        AnnotationRow.qualifier == key.qualifier,
    )


def _to_row(key: AnnotationKey, value: Any = None) -> AnnotationRow:
    return AnnotationRow(
        collection=key.collection.value,
        owner_id=key.owner_id,
        subject_id=key.subject_id,
        qualifier=key.qualifier,
        value=value,
    )


def _to_record(row: AnnotationRow) -> AnnotationRecord:
    return AnnotationRecord(
        key=AnnotationKey(
            collection=Collection(row.collection),
            owner_id=row.owner_id,
            subject_id=row.subject_id,
            qualifier=row.qualifier,
        ),
        value=row.value,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SQLAlchemyAnnotationStore(AnnotationStorePort):
    """Annotation store backed by SQLAlchemy asyncio."""

    def __init__(self, database: Database):
        self._db = database

    async def insert_if_absent(self, key: AnnotationKey, value: Any = None) -> bool:
        async with self._db.session() as session:
            session.add(_to_row(key, value))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.debug("annotation_already_exists", collection=key.collection.value)
                return False
        return True

    async def insert_many_if_absent(self, keys: Iterable[AnnotationKey]) -> int:
        pending = list(dict.fromkeys(keys))
        if not pending:
            return 0

        async with self._db.session() as session:
            missing = []
            for key in pending:
                existing = await session.scalar(select(AnnotationRow.id).where(*_key_clause(key)))
                if existing is None:
                    missing.append(key)

            session.add_all(_to_row(key) for key in missing)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race with a concurrent writer; settle key by key
                await session.rollback()
                inserted = 0
                for key in missing:
                    inserted += await self.insert_if_absent(key)
                return inserted

        return len(missing)

    async def upsert(self, key: AnnotationKey, value: Any) -> None:
        for _attempt in range(2):
            async with self._db.session() as session:
                row = await session.scalar(select(AnnotationRow).where(*_key_clause(key)))
                if row is None:
                    session.add(_to_row(key, value))
                else:
                    row.value = value
                    row.updated_at = datetime.now(UTC)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    continue
                return

        logger.error("annotation_upsert_conflict", collection=key.collection.value)
        raise StorageError(f"Concurrent writes kept conflicting on {key.collection.value}")

    async def delete(self, key: AnnotationKey) -> bool:
        async with self._db.session() as session:
            result = await session.execute(delete(AnnotationRow).where(*_key_clause(key)))
            await session.commit()
        return result.rowcount > 0

    async def find(
        self,
        collection: Collection,
        owner_id: str,
        *,
        subject_id: str | None = None,
    ) -> list[AnnotationRecord]:
        query = select(AnnotationRow).where(
            AnnotationRow.collection == collection.value,
            AnnotationRow.owner_id == owner_id,
        )
        if subject_id is not None:
            query = query.where(AnnotationRow.subject_id == subject_id)
        query = query.order_by(AnnotationRow.created_at, AnnotationRow.id)

        async with self._db.session() as session:
            rows = (await session.scalars(query)).all()
        return [_to_record(row) for row in rows]

    async def health_check(self) -> bool:
        return await self._db.health_check()


__all__ = ["SQLAlchemyAnnotationStore"]
