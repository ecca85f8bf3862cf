"""WebSocket room broadcaster.

Implements BroadcasterPort. Clients connect once and join any number of
rooms (the shared "global" room, their own "user-<id>" room); events are
fanned out to every socket in the target room.
"""

from __future__ import annotations

import asyncio
import json

import structlog
from fastapi import WebSocket
from fastapi.websockets import WebSocketState

from tixbridge.application.ports import BroadcasterPort
from tixbridge.domain.value_objects import ChangeEvent

logger = structlog.get_logger(__name__)


class ConnectionManager(BroadcasterPort):
    """Tracks active WebSocket connections per room."""

    def __init__(self) -> None:
        self._rooms: dict[str, set[WebSocket]] = {}
        self._memberships: dict[WebSocket, set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        async with self._lock:
            self._memberships.setdefault(websocket, set())
        logger.info("websocket_connected", connections=len(self._memberships))

    async def join(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._rooms.setdefault(room, set()).add(websocket)
            self._memberships.setdefault(websocket, set()).add(room)
        logger.debug("websocket_joined_room", room=room)

    async def disconnect(self, websocket: WebSocket) -> None:
        """Unregister a WebSocket connection from every room."""
        async with self._lock:
            for room in self._memberships.pop(websocket, set()):
                members = self._rooms.get(room)
                if members is None:
                    continue
                members.discard(websocket)
                if not members:
                    del self._rooms[room]
        logger.info("websocket_disconnected", connections=len(self._memberships))

    async def publish(self, event: ChangeEvent) -> int:
        async with self._lock:
            targets = list(self._rooms.get(event.room, ()))

        if not targets:
            return 0

        payload = json.dumps(event.to_message(), default=str)
        delivered = 0
        dead: list[WebSocket] = []

        for websocket in targets:
            if websocket.client_state != WebSocketState.CONNECTED:
                dead.append(websocket)
                continue
            try:
                await websocket.send_text(payload)
                delivered += 1
            except Exception as e:
                logger.warning("websocket_send_failed", room=event.room, error=str(e))
                dead.append(websocket)

        for websocket in dead:
            await self.disconnect(websocket)

        logger.debug("event_broadcast", event_name=event.name, room=event.room, delivered=delivered)
        return delivered

    def room_sizes(self) -> dict[str, int]:
        return {room: len(members) for room, members in self._rooms.items()}

    @property
    def connection_count(self) -> int:
        return len(self._memberships)


__all__ = ["ConnectionManager"]
