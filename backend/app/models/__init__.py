"""Database models package."""

from .base import Base
from .chat import (
    Conversation,
    ConversationParticipant,
    Message,
    MessageReaction,
    MessageTranslation,
    direct_key_for,
)
from .enums import Proficiency, ReactionType, VoiceRoomTopic
from .users import Language, User, UserLearningLanguage, user_connections, user_native_languages
from .voice import VoiceRoom, VoiceRoomParticipant, VoiceRoomRecording, voice_room_languages

__all__ = [
    "Base",
    "User",
    "Language",
    "UserLearningLanguage",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "MessageTranslation",
    "MessageReaction",
    "VoiceRoom",
    "VoiceRoomParticipant",
    "VoiceRoomRecording",
    "Proficiency",
    "ReactionType",
    "VoiceRoomTopic",
    "direct_key_for",
    "user_connections",
    "user_native_languages",
    "voice_room_languages",
]
