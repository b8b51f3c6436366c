"""Participant state machine for voice rooms.

The functions here mutate an already loaded room object in memory and never
talk to the database themselves; the caller loads the room under a row lock,
applies one transition, and commits. Keeping the rules free of persistence
makes them easy to exercise with plain objects in tests.

A room only has to provide ``participants`` (in join order), ``host_id``,
``max_participants``, ``is_private``, ``password``, ``is_active`` and
``end_time`` plus ``add_participant``/``remove_participant``.
"""

from __future__ import annotations

import hmac
from datetime import datetime
from typing import Callable, Protocol, Sequence


class ParticipantLike(Protocol):
    user_id: int
    is_muted: bool
    is_deafened: bool
    joined_at: datetime


class RoomLike(Protocol):
    host_id: int
    max_participants: int
    is_private: bool
    password: str | None
    is_active: bool
    end_time: datetime | None

    @property
    def participants(self) -> Sequence[ParticipantLike]: ...

    def add_participant(self, user_id: int, joined_at: datetime) -> ParticipantLike: ...

    def remove_participant(self, participant: ParticipantLike) -> None: ...


class VoiceRoomError(Exception):
    """Base class for rejected voice-room transitions."""

    status_code = 400
    detail = "Voice room operation rejected"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class AlreadyJoined(VoiceRoomError):
    detail = "User is already in this voice room"


class AtCapacity(VoiceRoomError):
    detail = "Voice room is at full capacity"


class InvalidPassword(VoiceRoomError):
    status_code = 401
    detail = "Invalid or missing password for private room"


class NotInRoom(VoiceRoomError):
    detail = "User is not in this voice room"


class NotAuthorized(VoiceRoomError):
    status_code = 403
    detail = "User is not authorized to manage this voice room"


class RoomClosed(VoiceRoomError):
    detail = "Voice room has been closed"


def _plain_compare(stored: str | None, supplied: str) -> bool:
    if stored is None:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


def find_participant(room: RoomLike, user_id: int) -> ParticipantLike | None:
    return next((p for p in room.participants if p.user_id == user_id), None)


def _require_participant(room: RoomLike, user_id: int) -> ParticipantLike:
    participant = find_participant(room, user_id)
    if participant is None:
        raise NotInRoom()
    return participant


def join(
    room: RoomLike,
    user_id: int,
    *,
    password: str | None,
    now: datetime,
    password_matches: Callable[[str | None, str], bool] | None = None,
) -> ParticipantLike:
    """Append ``user_id`` to the room's participants.

    ``password_matches(stored, supplied)`` decides whether a supplied password
    opens a private room; it defaults to a constant-time equality check.
    """

    if not room.is_active:
        raise RoomClosed()
    if find_participant(room, user_id) is not None:
        raise AlreadyJoined()
    if len(room.participants) >= room.max_participants:
        raise AtCapacity()
    if room.is_private:
        check = password_matches or _plain_compare
        if not password or not check(room.password, password):
            raise InvalidPassword()
    return room.add_participant(user_id, now)


def leave(room: RoomLike, user_id: int, *, now: datetime) -> ParticipantLike:
    """Remove ``user_id``, hand the host role over and close an empty room."""

    participant = _require_participant(room, user_id)
    room.remove_participant(participant)

    remaining = room.participants
    if room.host_id == user_id and remaining:
        room.host_id = remaining[0].user_id
    if not remaining:
        room.is_active = False
        room.end_time = now
    return participant


def toggle_mute(room: RoomLike, user_id: int) -> ParticipantLike:
    participant = _require_participant(room, user_id)
    participant.is_muted = not participant.is_muted
    return participant


def toggle_deafen(room: RoomLike, user_id: int) -> ParticipantLike:
    """Flip deafened; muted always follows the new deafened value.

    Un-deafening clears mute even if the participant had muted themselves
    before deafening.
    """

    participant = _require_participant(room, user_id)
    participant.is_deafened = not participant.is_deafened
    participant.is_muted = participant.is_deafened
    return participant


def ensure_host(room: RoomLike, user_id: int) -> None:
    if room.host_id != user_id:
        raise NotAuthorized()


__all__ = [
    "ParticipantLike",
    "RoomLike",
    "VoiceRoomError",
    "AlreadyJoined",
    "AtCapacity",
    "InvalidPassword",
    "NotInRoom",
    "NotAuthorized",
    "RoomClosed",
    "find_participant",
    "join",
    "leave",
    "toggle_mute",
    "toggle_deafen",
    "ensure_host",
]
