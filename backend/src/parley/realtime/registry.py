"""In-process table of which sessions are subscribed to which rooms."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, Set


class RoomPresenceRegistry:
    """Track room membership for connected transport sessions.

    One instance is owned by the application and handed to the relay; nothing
    is persisted and a restarted process starts empty. Members are kept in
    join order so snapshots are stable.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._session_rooms: Dict[str, Set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def add(self, room: str, session_id: str) -> list[str]:
        """Subscribe ``session_id`` to ``room`` and return the members afterwards."""

        async with self._lock:
            bucket = self._rooms.setdefault(room, {})
            bucket[session_id] = None
            self._session_rooms[session_id].add(room)
            return list(bucket)

    async def remove(self, room: str, session_id: str) -> bool:
        async with self._lock:
            return self._remove_locked(room, session_id)

    async def members(self, room: str) -> list[str]:
        async with self._lock:
            return list(self._rooms.get(room, {}))

    async def rooms_of(self, session_id: str) -> set[str]:
        async with self._lock:
            return set(self._session_rooms.get(session_id, set()))

    async def discard_session(self, session_id: str) -> set[str]:
        """Drop a session from every room and return the rooms it had joined."""

        async with self._lock:
            rooms = set(self._session_rooms.get(session_id, set()))
            for room in rooms:
                self._remove_locked(room, session_id)
            self._session_rooms.pop(session_id, None)
            return rooms

    async def room_count(self) -> int:
        async with self._lock:
            return len(self._rooms)

    def _remove_locked(self, room: str, session_id: str) -> bool:
        bucket = self._rooms.get(room)
        if not bucket or session_id not in bucket:
            return False
        bucket.pop(session_id, None)
        if not bucket:
            self._rooms.pop(room, None)
        rooms = self._session_rooms.get(session_id)
        if rooms is not None:
            rooms.discard(room)
            if not rooms:
                self._session_rooms.pop(session_id, None)
        return True


__all__ = ["RoomPresenceRegistry"]
