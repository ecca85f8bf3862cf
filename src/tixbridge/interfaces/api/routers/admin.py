"""Administrative user management. Requires an admin bearer token."""

from typing import Any

import structlog
from fastapi import APIRouter

from tixbridge.interfaces.api.dependencies import AdminUser, Container
from tixbridge.interfaces.api.schemas import CreateUserRequest, PasswordRequest, UpdateUserRequest

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("")
async def list_users(container: Container, admin: AdminUser) -> dict[str, Any]:
    users = await container.users.list_users()
    return {"users": [user.to_public() for user in users]}


@router.post("")
async def create_user(
    body: CreateUserRequest, container: Container, admin: AdminUser
) -> dict[str, Any]:
    user = await container.users.create_user(body.email, body.password, is_admin=body.is_admin)
    logger.info("admin_created_user", admin_id=admin.id, user_id=user.id)
    return {"success": True, "message": "User created successfully", "userId": user.id}


@router.put("/{user_id}")
async def update_user(
    user_id: str, body: UpdateUserRequest, container: Container, admin: AdminUser
) -> dict[str, Any]:
    await container.users.update_user(user_id, email=body.email, is_admin=body.is_admin)
    return {"success": True, "message": "User updated successfully"}


@router.delete("/{user_id}")
async def delete_user(user_id: str, container: Container, admin: AdminUser) -> dict[str, Any]:
    await container.users.delete_user(user_id)
    logger.info("admin_deleted_user", admin_id=admin.id, user_id=user_id)
    return {"success": True, "message": "User deleted successfully"}


@router.patch("/{user_id}/admin")
async def toggle_admin(user_id: str, container: Container, admin: AdminUser) -> dict[str, Any]:
    user = await container.users.toggle_admin(user_id)
    return {
        "success": True,
        "message": "Admin status toggled successfully",
        "isAdmin": user.is_admin,
    }


@router.patch("/{user_id}/password")
async def change_password(
    user_id: str, body: PasswordRequest, container: Container, admin: AdminUser
) -> dict[str, Any]:
    await container.users.change_password(user_id, body.password)
    return {"success": True, "message": "Password changed successfully"}
