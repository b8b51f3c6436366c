"""Realtime relay for chat rooms and voice-room signalling."""

from .events import ClientEvent, parse_client_event
from .registry import RoomPresenceRegistry
from .relay import RealtimeRelay, safe_send_json, voice_group

__all__ = [
    "ClientEvent",
    "parse_client_event",
    "RoomPresenceRegistry",
    "RealtimeRelay",
    "safe_send_json",
    "voice_group",
]
