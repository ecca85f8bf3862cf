"""Async SQLAlchemy engine and session management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tixbridge.adapters.persistence.models import Base
from tixbridge.domain.exceptions import StorageError

logger = structlog.get_logger(__name__)


def _is_in_memory_sqlite(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


class Database:
    """Owns the async engine and hands out sessions.

    In-memory SQLite URLs share one connection (StaticPool) so that every
    session sees the same database.
    """

    def __init__(self, database_url: str):
        """Initialize engine and session factory.

        Args:
            database_url: SQLAlchemy async URL (e.g. sqlite+aiosqlite:///./tixbridge.db)
        """
        engine_kwargs: dict = {}
        if _is_in_memory_sqlite(database_url):
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        self._url = make_url(database_url)
        self._engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @retry(
        retry=retry_if_exception_type(OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def initialize(self) -> None:
        """Create tables that do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_initialized", backend=self._url.get_backend_name())

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session; driver errors other than integrity violations become StorageError."""
        async with self._session_factory() as session:
            try:
                yield session
            except IntegrityError:
                raise
            except SQLAlchemyError as e:
                logger.error("database_error", error=str(e))
                raise StorageError("Database operation failed", details=str(e)) from e

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("database_health_check_failed", error=str(e))
            return False
        return True

    async def dispose(self) -> None:
        await self._engine.dispose()


__all__ = ["Database"]
