"""Voice-room participant state machine."""

from .state import (  # noqa: F401
    AlreadyJoined,
    AtCapacity,
    InvalidPassword,
    NotAuthorized,
    NotInRoom,
    RoomClosed,
    VoiceRoomError,
    ensure_host,
    join,
    leave,
    toggle_deafen,
    toggle_mute,
)

__all__ = [
    "VoiceRoomError",
    "AlreadyJoined",
    "AtCapacity",
    "InvalidPassword",
    "NotInRoom",
    "NotAuthorized",
    "RoomClosed",
    "join",
    "leave",
    "toggle_mute",
    "toggle_deafen",
    "ensure_host",
]
