"""Schemas for user profiles, languages and connections."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, constr, field_validator

from app.models.enums import Proficiency
from app.schemas.common import APIModel
from app.schemas.languages import LanguageRead


class Location(APIModel):
    country: constr(strip_whitespace=True, max_length=64) | None = None
    city: constr(strip_whitespace=True, max_length=64) | None = None


class PublicUser(APIModel):
    """Minimal public-facing user information."""

    id: int
    username: str
    profile_picture: str = Field(validation_alias="avatar_url", serialization_alias="profilePicture")
    is_online: bool = False
    last_active: datetime | None = None


class LearningLanguageRead(APIModel):
    language: LanguageRead
    proficiency: Proficiency


class UserRead(PublicUser):
    """Full profile including language preferences."""

    email: str
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    location: Location = Field(default_factory=Location)
    native_languages: list[LanguageRead] = Field(default_factory=list)
    learning_languages: list[LearningLanguageRead] = Field(default_factory=list)
    created_at: datetime | None = None


class LearningLanguageIn(APIModel):
    language: int = Field(..., description="Language id")
    proficiency: Proficiency = Proficiency.BEGINNER


class LanguagesUpdate(APIModel):
    native_languages: list[int] | None = None
    learning_languages: list[LearningLanguageIn] | None = None

    @field_validator("learning_languages")
    @classmethod
    def unique_learning_languages(
        cls, value: list[LearningLanguageIn] | None
    ) -> list[LearningLanguageIn] | None:
        if value is None:
            return value
        seen: set[int] = set()
        for entry in value:
            if entry.language in seen:
                raise ValueError("Each learning language may only be listed once")
            seen.add(entry.language)
        return value


class ProfilePictureUpdate(APIModel):
    profile_picture: constr(strip_whitespace=True, min_length=1, max_length=512)


class Recommendation(APIModel):
    user: UserRead
    match_score: int
