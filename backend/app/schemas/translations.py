"""Schemas for the translation proxy and corrections."""

from __future__ import annotations

from pydantic import Field, constr

from app.schemas.common import APIModel


class TranslateRequest(APIModel):
    text: constr(strip_whitespace=True, min_length=1, max_length=5000)
    source: constr(strip_whitespace=True, min_length=2, max_length=8) | None = Field(
        default=None, alias="from", description="Source language code; detected when omitted"
    )
    target: constr(strip_whitespace=True, min_length=2, max_length=8) = Field(..., alias="to")


class TranslationResult(APIModel):
    translated_text: str
    detected_source_language: str
    original_text: str


class CorrectionRequest(APIModel):
    language_id: int
    corrected_content: constr(strip_whitespace=True, min_length=1, max_length=5000)
