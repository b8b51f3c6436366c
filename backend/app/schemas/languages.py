"""Schemas for the language catalogue."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, constr

from app.schemas.common import APIModel


class LanguageBase(APIModel):
    code: constr(strip_whitespace=True, to_lower=True, min_length=2, max_length=3) = Field(
        ..., description="ISO 639 code"
    )
    name: constr(strip_whitespace=True, min_length=1, max_length=64)
    native_name: constr(strip_whitespace=True, min_length=1, max_length=64)
    flag: str = Field(default="", max_length=16)
    popularity: int = Field(default=0, ge=0)


class LanguageCreate(LanguageBase):
    pass


class LanguageUpdate(APIModel):
    code: constr(strip_whitespace=True, to_lower=True, min_length=2, max_length=3) | None = None
    name: constr(strip_whitespace=True, min_length=1, max_length=64) | None = None
    native_name: constr(strip_whitespace=True, min_length=1, max_length=64) | None = None
    flag: str | None = Field(default=None, max_length=16)
    popularity: int | None = Field(default=None, ge=0)


class LanguageRead(LanguageBase):
    id: int
    created_at: datetime | None = None
