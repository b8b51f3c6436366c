"""Room-scoped fan-out of chat and voice signalling frames."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from app.monitoring.metrics import realtime_connections, realtime_events_total

from .events import (
    ClientEvent,
    Connected,
    JoinChat,
    JoinVoiceRoom,
    Ping,
    Pong,
    ReceiveMessage,
    RoomUsers,
    SendMessage,
    ServerEvent,
    Signal,
    SignalRelay,
    UserDisconnected,
    UserJoined,
)
from .registry import RoomPresenceRegistry

logger = logging.getLogger(__name__)

VOICE_ROOM_PREFIX = "voice_"


def voice_group(room_id: str) -> str:
    return f"{VOICE_ROOM_PREFIX}{room_id}"


async def safe_send_json(websocket: WebSocket, data: dict[str, Any]) -> bool:
    """Send ``data`` if the socket is still open; report whether it went out."""

    if websocket.application_state != WebSocketState.CONNECTED:
        return False
    try:
        await websocket.send_json(data)
        return True
    except (WebSocketDisconnect, RuntimeError) as exc:
        logger.debug("Failed to send websocket message: %s", exc)
        return False


@dataclass(slots=True)
class Session:
    session_id: str
    websocket: WebSocket
    user_id: int | None = None


class RealtimeRelay:
    """Route client frames to the sessions subscribed to the same room.

    With ``scoped_disconnect`` enabled, ``user_disconnected`` only reaches
    sessions sharing a room with the one that left; otherwise every other
    connected session is told.
    """

    def __init__(
        self,
        registry: RoomPresenceRegistry | None = None,
        *,
        scoped_disconnect: bool = False,
    ) -> None:
        self._registry = registry or RoomPresenceRegistry()
        self._scoped_disconnect = scoped_disconnect
        self._sessions: Dict[str, Session] = {}
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> RoomPresenceRegistry:
        return self._registry

    async def session_ids(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)

    async def connect(self, websocket: WebSocket, *, user_id: int | None = None) -> str:
        """Register an accepted socket and greet it with its session id."""

        session_id = uuid.uuid4().hex
        async with self._lock:
            self._sessions[session_id] = Session(session_id, websocket, user_id)
        realtime_connections.labels("sessions").inc()
        logger.info("Realtime session %s connected for user %s", session_id, user_id)
        await self._send(session_id, Connected(session_id=session_id))
        return session_id

    async def dispatch(self, session_id: str, event: ClientEvent) -> None:
        realtime_events_total.labels(event.type, "in").inc()
        if isinstance(event, JoinChat):
            await self.join_chat(session_id, event.room_id)
        elif isinstance(event, SendMessage):
            await self.send_message(session_id, event)
        elif isinstance(event, JoinVoiceRoom):
            await self.join_voice_room(session_id, event.room_id)
        elif isinstance(event, Signal):
            await self.signal(session_id, event.to, event.signal)
        elif isinstance(event, Ping):
            await self._send(session_id, Pong())

    async def join_chat(self, session_id: str, room_id: str) -> None:
        await self._registry.add(room_id, session_id)
        await self._track_rooms()
        logger.debug("Session %s joined chat room %s", session_id, room_id)

    async def send_message(self, session_id: str, event: SendMessage) -> None:
        frame = ReceiveMessage(**event.relay_payload())
        await self._broadcast(await self._registry.members(event.room_id), frame)

    async def join_voice_room(self, session_id: str, room_id: str) -> None:
        members = await self._registry.add(voice_group(room_id), session_id)
        await self._track_rooms()
        others = [member for member in members if member != session_id]
        logger.debug("Session %s joined voice room %s with %d peers", session_id, room_id, len(others))
        await self._send(session_id, RoomUsers(users=others))
        await self._broadcast(others, UserJoined(user_id=session_id))

    async def signal(self, session_id: str, target: str, payload: Any) -> None:
        # Unknown targets are dropped silently; the peer may have just left.
        delivered = await self._send(target, SignalRelay(sender=session_id, signal=payload))
        if not delivered:
            logger.debug("Dropped signal from %s to unknown session %s", session_id, target)

    async def disconnect(self, session_id: str) -> None:
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return
        realtime_connections.labels("sessions").dec()

        rooms = await self._registry.discard_session(session_id)
        await self._track_rooms()
        if self._scoped_disconnect:
            recipients: set[str] = set()
            for room in rooms:
                recipients.update(await self._registry.members(room))
        else:
            recipients = set(await self.session_ids())
        recipients.discard(session_id)
        logger.info("Realtime session %s disconnected from %d rooms", session_id, len(rooms))
        await self._broadcast(sorted(recipients), UserDisconnected(user_id=session_id))

    async def _track_rooms(self) -> None:
        realtime_connections.labels("rooms").set(await self._registry.room_count())

    async def _send(self, session_id: str, event: ServerEvent) -> bool:
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return False
        sent = await safe_send_json(session.websocket, event.to_wire())
        if sent:
            realtime_events_total.labels(event.type, "out").inc()
        return sent

    async def _broadcast(self, session_ids: Iterable[str], event: ServerEvent) -> None:
        for session_id in session_ids:
            await self._send(session_id, event)


__all__ = ["RealtimeRelay", "Session", "safe_send_json", "voice_group", "VOICE_ROOM_PREFIX"]
