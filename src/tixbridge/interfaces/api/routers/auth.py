"""Login endpoint."""

from typing import Any

from fastapi import APIRouter

from tixbridge.interfaces.api.dependencies import Container
from tixbridge.interfaces.api.schemas import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, container: Container) -> dict[str, Any]:
    token, user = await container.users.authenticate(body.email, body.password)
    return {"token": token, "user": user.to_public()}
