"""Port interfaces for persistence.

The annotation store is a generic collection store: records are addressed by
a compound key and duplicate inserts are reported, never raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tixbridge.domain.entities import User
    from tixbridge.domain.value_objects import AnnotationKey, AnnotationRecord, Collection


class AnnotationStorePort(ABC):
    """Port interface for annotation storage."""

    @abstractmethod
    async def insert_if_absent(self, key: AnnotationKey, value: Any = None) -> bool:
        """Insert a record unless one already exists for the key.

        Returns:
            True if inserted, False if the key was already present
        """
        ...

    @abstractmethod
    async def insert_many_if_absent(self, keys: Iterable[AnnotationKey]) -> int:
        """Insert several value-less records, skipping existing keys.

        Returns:
            Number of records actually inserted
        """
        ...

    @abstractmethod
    async def upsert(self, key: AnnotationKey, value: Any) -> None:
        """Create or replace the value stored under the key."""
        ...

    @abstractmethod
    async def delete(self, key: AnnotationKey) -> bool:
        """Delete the record for the key.

        Returns:
            True if a record was deleted
        """
        ...

    @abstractmethod
    async def find(
        self,
        collection: Collection,
        owner_id: str,
        *,
        subject_id: str | None = None,
    ) -> list[AnnotationRecord]:
        """List records of one owner in a collection, oldest first.

        Args:
            collection: Collection to query
            owner_id: User id or GLOBAL_OWNER
            subject_id: Optional filter on the subject
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check that the backing store answers queries."""
        ...


class UserStorePort(ABC):
    """Port interface for user account storage."""

    @abstractmethod
    async def create(self, email: str, password_hash: str, *, is_admin: bool = False) -> User:
        """Create a user.

        Raises:
            UserAlreadyExistsError: If the email is taken
        """
        ...

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def list_all(self) -> list[User]: ...

    @abstractmethod
    async def update(self, user_id: str, **fields: Any) -> User | None:
        """Update selected columns (email, is_admin, password_hash, last_login).

        Returns:
            The updated user, or None if it does not exist
        """
        ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool: ...


__all__ = ["AnnotationStorePort", "UserStorePort"]
