"""User accounts: login, caller resolution and admin management."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from tixbridge.domain.exceptions import (
    AuthenticationError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from tixbridge.infrastructure.security import hash_password, verify_password

if TYPE_CHECKING:
    from tixbridge.application.ports import UserStorePort
    from tixbridge.domain.entities import User

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserAdminUseCase:
    """Account lookups and administrative user management."""

    def __init__(self, users: UserStorePort) -> None:
        self._users = users

    # === Authentication ===

    async def authenticate(self, email: str, password: str) -> tuple[str, User]:
        """Check credentials and record the login.

        Returns:
            Tuple of (token, user); the token is the user id

        Raises:
            InvalidRequestError: If email or password is empty
            AuthenticationError: If the credentials do not match
        """
        if not email or not password:
            msg = "Email and password required"
            raise InvalidRequestError(msg)

        user = await self._users.get_by_email(email)
        if user is None or not await asyncio.to_thread(
            verify_password, password, user.password_hash
        ):
            logger.info("login_rejected", email=email)
            msg = "Invalid credentials"
            raise AuthenticationError(msg)

        updated = await self._users.update(user.id, last_login=datetime.now(UTC))
        logger.info("login_succeeded", user_id=user.id)
        return user.id, updated or user

    async def resolve_username(self, username: str | None) -> User:
        """Resolve the ``x-username`` header to a user."""
        if not username:
            msg = "Username required"
            raise AuthenticationError(msg)
        user = await self._users.get_by_email(username)
        if user is None:
            msg = "User not found"
            raise AuthenticationError(msg)
        return user

    async def resolve_token(self, token: str | None) -> User:
        """Resolve a bearer token to a user.

        Raises:
            AuthenticationError: If no token was sent
            PermissionDeniedError: If the token matches no user
        """
        if not token:
            msg = "Access token required"
            raise AuthenticationError(msg)
        user = await self._users.get_by_id(token)
        if user is None:
            msg = "Invalid token"
            raise PermissionDeniedError(msg)
        return user

    # === Management ===

    async def list_users(self) -> list[User]:
        return await self._users.list_all()

    async def create_user(self, email: str, password: str, *, is_admin: bool = False) -> User:
        if not email or not password:
            msg = "Email and password required"
            raise InvalidRequestError(msg)
        password_hash = await asyncio.to_thread(hash_password, password)
        return await self._users.create(email, password_hash, is_admin=is_admin)

    async def update_user(self, user_id: str, **fields: Any) -> User:
        """Update email and/or admin flag. ``None`` values are ignored."""
        changes = {k: v for k, v in fields.items() if v is not None}
        allowed = {"email", "is_admin"}
        if set(changes) - allowed:
            msg = f"Unsupported user fields: {sorted(set(changes) - allowed)}"
            raise InvalidRequestError(msg)
        if not changes:
            return await self._get(user_id)
        user = await self._users.update(user_id, **changes)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        logger.info("user_updated", user_id=user_id, fields=sorted(changes))
        return user

    async def delete_user(self, user_id: str) -> None:
        if not await self._users.delete(user_id):
            raise NotFoundError(f"User not found: {user_id}")

    async def toggle_admin(self, user_id: str) -> User:
        user = await self._get(user_id)
        updated = await self._users.update(user_id, is_admin=not user.is_admin)
        if updated is None:
            raise NotFoundError(f"User not found: {user_id}")
        logger.info("user_admin_toggled", user_id=user_id, is_admin=updated.is_admin)
        return updated

    async def change_password(self, user_id: str, password: str) -> None:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            msg = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            raise InvalidRequestError(msg)
        password_hash = await asyncio.to_thread(hash_password, password)
        if await self._users.update(user_id, password_hash=password_hash) is None:
            raise NotFoundError(f"User not found: {user_id}")
        logger.info("user_password_changed", user_id=user_id)

    async def change_password_by_email(self, email: str, password: str) -> None:
        user = await self._users.get_by_email(email)
        if user is None:
            raise NotFoundError(f"User not found: {email}")
        await self.change_password(user.id, password)

    async def _get(self, user_id: str) -> User:
        user = await self._users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user


__all__ = ["MIN_PASSWORD_LENGTH", "UserAdminUseCase"]
