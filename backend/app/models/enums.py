from __future__ import annotations

from enum import Enum


class Proficiency(str, Enum):
    """Self-assessed level for a language the user is learning."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    FLUENT = "fluent"


class ReactionType(str, Enum):
    """Reactions a user can leave on a message."""

    LIKE = "like"
    HEART = "heart"
    LAUGH = "laugh"
    CLAP = "clap"
    CONFUSED = "confused"
    SAD = "sad"


class VoiceRoomTopic(str, Enum):
    """Conversation style advertised by a voice room."""

    CASUAL = "casual"
    FORMAL = "formal"
    PRACTICE = "practice"
    LEARNING = "learning"
    TEACHING = "teaching"
    DISCUSSION = "discussion"
    DEBATE = "debate"
    OTHER = "other"
