"""Schemas related to conversations and chat messages."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from app.models.enums import ReactionType
from app.schemas.common import APIModel
from app.schemas.languages import LanguageRead
from app.schemas.users import PublicUser


class TranslationRead(APIModel):
    language: LanguageRead
    content: str
    corrected: bool = False
    corrected_by: PublicUser | None = None
    corrected_content: str | None = None


class ReactionRead(APIModel):
    user_id: int
    type: ReactionType


class MessageRead(APIModel):
    id: int
    conversation_id: int
    sender: PublicUser
    content: str
    original_language: LanguageRead | None = None
    translations: list[TranslationRead] = Field(default_factory=list)
    reactions: list[ReactionRead] = Field(default_factory=list)
    attachments: list[Any] = Field(default_factory=list)
    read: bool = False
    created_at: datetime
    updated_at: datetime


class MessageCreate(APIModel):
    content: str = Field(..., min_length=1, max_length=2000)
    original_language: int | None = Field(default=None, description="Language id of the content")
    attachments: list[Any] = Field(default_factory=list)

    @model_validator(mode="after")
    def strip_content(self) -> "MessageCreate":
        if not self.content.strip():
            raise ValueError("Message content cannot be empty")
        return self


class LastMessageRead(APIModel):
    id: int
    sender_id: int
    content: str
    created_at: datetime


class ConversationRead(APIModel):
    """Conversation with participants and the per-participant unread counters."""

    id: int
    is_group: bool
    name: str | None = None
    group_admin_id: int | None = None
    participants: list[PublicUser] = Field(validation_alias="participant_users")
    main_language: LanguageRead | None = None
    last_message: LastMessageRead | None = None
    unread_count: dict[int, int] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class ConversationSummary(ConversationRead):
    """Entry of the caller's conversation list."""

    my_unread_count: int = 0
    other_participant: PublicUser | None = None


class ConversationCreate(APIModel):
    participants: list[int] = Field(..., min_length=1)
    is_group: bool = False
    name: str | None = Field(default=None, max_length=128)
    main_language: int | None = None
