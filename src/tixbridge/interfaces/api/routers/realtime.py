"""WebSocket endpoint for live annotation updates."""

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from tixbridge.domain.value_objects import GLOBAL_ROOM, user_room

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["realtime"])


def _room_for(message: dict) -> str | None:
    action = message.get("action")
    if action == "join-global-room":
        return GLOBAL_ROOM
    if action == "join-user-room" and message.get("userId"):
        return user_room(str(message["userId"]))
    return None


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Clients join rooms by sending ``{"action": ...}`` messages.

    Supported actions: ``join-global-room`` and ``join-user-room`` (with
    ``userId``). Each join is acknowledged with a ``joined`` event.
    """
    manager = websocket.app.state.container.broadcaster
    await manager.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                message = None

            room = _room_for(message) if isinstance(message, dict) else None
            if room is None:
                await websocket.send_json({"event": "error", "data": {"message": "Unknown action"}})
                continue

            await manager.join(websocket, room)
            await websocket.send_json({"event": "joined", "data": {"room": room}})
    except WebSocketDisconnect:
        logger.debug("websocket_client_left")
    finally:
        await manager.disconnect(websocket)
