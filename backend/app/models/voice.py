from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import VoiceRoomTopic
from app.models.users import Language, User

voice_room_languages = Table(
    "voice_room_languages",
    Base.metadata,
    Column("voice_room_id", ForeignKey("voice_rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("language_id", ForeignKey("languages.id", ondelete="CASCADE"), primary_key=True),
)


class VoiceRoom(Base):
    """Ad-hoc voice session hosted by a user."""

    __tablename__ = "voice_rooms"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(200))
    host_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_private: Mapped[bool] = mapped_column(default=False, nullable=False)
    password: Mapped[str | None] = mapped_column(String(255))
    max_participants: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    topic: Mapped[VoiceRoomTopic] = mapped_column(
        SAEnum(
            VoiceRoomTopic,
            name="voice_room_topic",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=VoiceRoomTopic.CASUAL,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    host: Mapped[User] = relationship(foreign_keys=[host_id])
    participants: Mapped[list["VoiceRoomParticipant"]] = relationship(
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="VoiceRoomParticipant.id",
    )
    languages: Mapped[list[Language]] = relationship(
        secondary=voice_room_languages, order_by="Language.name"
    )
    recordings: Mapped[list["VoiceRoomRecording"]] = relationship(
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="VoiceRoomRecording.id",
    )

    def add_participant(self, user_id: int, joined_at: datetime) -> "VoiceRoomParticipant":
        participant = VoiceRoomParticipant(
            user_id=user_id,
            is_muted=False,
            is_deafened=False,
            joined_at=joined_at,
        )
        self.participants.append(participant)
        return participant

    def remove_participant(self, participant: "VoiceRoomParticipant") -> None:
        self.participants.remove(participant)


class VoiceRoomParticipant(Base):
    """User currently joined to a voice room, in join order."""

    __tablename__ = "voice_room_participants"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_voice_room_participant"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    room_id: Mapped[int] = mapped_column(
        ForeignKey("voice_rooms.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_muted: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_deafened: Mapped[bool] = mapped_column(default=False, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    room: Mapped[VoiceRoom] = relationship(back_populates="participants")
    user: Mapped[User] = relationship()


class VoiceRoomRecording(Base):
    """Recording captured for a voice room session."""

    __tablename__ = "voice_room_recordings"

    id: Mapped[int] = mapped_column(primary_key=True)
    room_id: Mapped[int] = mapped_column(
        ForeignKey("voice_rooms.id", ondelete="CASCADE"), nullable=False
    )
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    size: Mapped[int | None] = mapped_column(Integer)

    room: Mapped[VoiceRoom] = relationship(back_populates="recordings")
