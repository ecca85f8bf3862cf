"""Persistence adapters (SQLAlchemy asyncio)."""

from tixbridge.adapters.persistence.annotation_store import SQLAlchemyAnnotationStore
from tixbridge.adapters.persistence.database import Database
from tixbridge.adapters.persistence.user_store import SQLAlchemyUserStore

__all__ = [
    "Database",
    "SQLAlchemyAnnotationStore",
    "SQLAlchemyUserStore",
]
