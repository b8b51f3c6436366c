from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import ReactionType
from app.models.users import Language, User


def direct_key_for(user_id: int, other_id: int) -> str:
    """Return the order-independent key identifying a one-to-one conversation."""

    low, high = sorted((user_id, other_id))
    return f"{low}:{high}"


class Conversation(Base):
    """Direct or group thread between users."""

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Only set for one-to-one conversations; the unique index keeps a single thread per pair.
    direct_key: Mapped[str | None] = mapped_column(String(64), unique=True)
    is_group: Mapped[bool] = mapped_column(default=False, nullable=False)
    name: Mapped[str | None] = mapped_column(String(128))
    group_admin_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    main_language_id: Mapped[int | None] = mapped_column(
        ForeignKey("languages.id", ondelete="SET NULL")
    )
    last_message_id: Mapped[int | None] = mapped_column(
        ForeignKey("messages.id", ondelete="SET NULL", use_alter=True, name="fk_conversation_last_message")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    participants: Mapped[list["ConversationParticipant"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationParticipant.id",
    )
    group_admin: Mapped[User | None] = relationship(foreign_keys=[group_admin_id])
    main_language: Mapped[Language | None] = relationship()
    last_message: Mapped["Message | None"] = relationship(
        foreign_keys=[last_message_id], post_update=True
    )

    @property
    def participant_users(self) -> list[User]:
        return [participant.user for participant in self.participants]

    def participant_entry(self, user_id: int) -> "ConversationParticipant | None":
        return next((p for p in self.participants if p.user_id == user_id), None)

    def participant_ids(self) -> list[int]:
        return [participant.user_id for participant in self.participants]

    def has_user(self, user_id: int) -> bool:
        return any(participant.user_id == user_id for participant in self.participants)

    @property
    def unread_count(self) -> dict[int, int]:
        return {participant.user_id: participant.unread_count for participant in self.participants}


class ConversationParticipant(Base):
    """Membership of a user in a conversation together with their unread counter."""

    __tablename__ = "conversation_participants"
    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_conversation_participant"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    unread_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    conversation: Mapped[Conversation] = relationship(back_populates="participants")
    user: Mapped[User] = relationship()


class Message(Base):
    """Message sent to a conversation."""

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_conversation", "conversation_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    original_language_id: Mapped[int | None] = mapped_column(
        ForeignKey("languages.id", ondelete="SET NULL")
    )
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    attachments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    sender: Mapped[User] = relationship()
    original_language: Mapped[Language | None] = relationship()
    translations: Mapped[list["MessageTranslation"]] = relationship(
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MessageTranslation.id",
    )
    reactions: Mapped[list["MessageReaction"]] = relationship(
        back_populates="message", cascade="all, delete-orphan"
    )


class MessageTranslation(Base):
    """Translated rendition of a message, optionally corrected by a user."""

    __tablename__ = "message_translations"
    __table_args__ = (
        UniqueConstraint("message_id", "language_id", name="uq_message_translation_language"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    message_id: Mapped[int] = mapped_column(
        ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    language_id: Mapped[int] = mapped_column(
        ForeignKey("languages.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    corrected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    corrected_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL")
    )
    corrected_content: Mapped[str | None] = mapped_column(Text)

    message: Mapped[Message] = relationship(back_populates="translations")
    language: Mapped[Language] = relationship()
    corrected_by: Mapped[User | None] = relationship()


class MessageReaction(Base):
    """Reaction left by a user on a message."""

    __tablename__ = "message_reactions"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", "type", name="uq_message_reaction"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    message_id: Mapped[int] = mapped_column(
        ForeignKey("messages.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[ReactionType] = mapped_column(
        SAEnum(
            ReactionType,
            name="reaction_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )

    message: Mapped[Message] = relationship(back_populates="reactions")
