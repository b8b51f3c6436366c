"""Schemas for voice rooms."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, constr, model_validator

from app.models.enums import VoiceRoomTopic
from app.schemas.common import APIModel
from app.schemas.languages import LanguageRead
from app.schemas.users import PublicUser


class VoiceParticipantRead(APIModel):
    user: PublicUser
    is_muted: bool
    is_deafened: bool
    joined_at: datetime | None = None


class RecordingRead(APIModel):
    url: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    size: int | None = None


class VoiceRoomRead(APIModel):
    """Room as returned to clients; the password never leaves the server."""

    id: int
    name: str
    description: str | None = None
    host: PublicUser
    participants: list[VoiceParticipantRead] = Field(default_factory=list)
    is_private: bool
    languages: list[LanguageRead] = Field(default_factory=list)
    max_participants: int
    topic: VoiceRoomTopic
    is_active: bool
    start_time: datetime | None = None
    end_time: datetime | None = None
    recordings: list[RecordingRead] = Field(default_factory=list)
    created_at: datetime | None = None


class VoiceRoomCreate(APIModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=50)
    description: constr(strip_whitespace=True, max_length=200) | None = None
    is_private: bool = False
    password: constr(min_length=1, max_length=128) | None = None
    languages: list[int] = Field(default_factory=list)
    max_participants: int | None = Field(default=None, ge=2, le=50)
    topic: VoiceRoomTopic = VoiceRoomTopic.CASUAL

    @model_validator(mode="after")
    def private_rooms_need_password(self) -> "VoiceRoomCreate":
        if self.is_private and not self.password:
            raise ValueError("Private rooms require a password")
        return self


class VoiceRoomUpdate(APIModel):
    """Editable room fields; host, participants and the active flag change through transitions only."""

    name: constr(strip_whitespace=True, min_length=1, max_length=50) | None = None
    description: constr(strip_whitespace=True, max_length=200) | None = None
    is_private: bool | None = None
    password: constr(min_length=1, max_length=128) | None = None
    languages: list[int] | None = None
    max_participants: int | None = Field(default=None, ge=2, le=50)
    topic: VoiceRoomTopic | None = None


class JoinRequest(APIModel):
    password: str | None = None


class MuteState(APIModel):
    is_muted: bool


class DeafenState(APIModel):
    is_deafened: bool
    is_muted: bool
