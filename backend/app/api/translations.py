"""Machine translation proxy and community corrections."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.api.languages import list_all
from app.database import get_db
from app.models import Language, Message, MessageTranslation, User
from app.schemas import (
    CorrectionRequest,
    DataResponse,
    LanguageRead,
    ListResponse,
    MessageRead,
    TranslateRequest,
    TranslationResult,
)
from app.services.conversations import load_message
from app.services.translation import TranslationClient, TranslationError, get_translation_client

router = APIRouter()


@router.post("/translate", response_model=DataResponse[TranslationResult])
async def translate_text(
    payload: TranslateRequest,
    _: User = Depends(get_current_user),
    client: TranslationClient = Depends(get_translation_client),
):
    try:
        translated = await client.translate(payload.text, payload.target, payload.source)
    except TranslationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error in translation service",
        ) from exc
    return DataResponse(
        data=TranslationResult(
            translated_text=translated,
            detected_source_language=payload.source or "auto",
            original_text=payload.text,
        )
    )


@router.post("/correct/{message_id}", response_model=DataResponse[MessageRead])
def correct_translation(
    message_id: int,
    payload: CorrectionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record a corrected translation, creating the entry when none exists yet."""

    message = db.get(Message, message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Message not found with id of {message_id}",
        )
    if db.get(Language, payload.language_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language not found with id of {payload.language_id}",
        )

    translation = db.execute(
        select(MessageTranslation).where(
            MessageTranslation.message_id == message.id,
            MessageTranslation.language_id == payload.language_id,
        )
    ).scalar_one_or_none()
    if translation is None:
        translation = MessageTranslation(
            message_id=message.id,
            language_id=payload.language_id,
            content=payload.corrected_content,
        )
        db.add(translation)
    translation.corrected = True
    translation.corrected_by_id = current_user.id
    translation.corrected_content = payload.corrected_content
    db.commit()
    db.expire_all()
    return DataResponse(data=MessageRead.model_validate(load_message(db, message.id)))


@router.get("/languages", response_model=ListResponse[LanguageRead])
def supported_languages(db: Session = Depends(get_db)):
    languages = list_all(db)
    return ListResponse(count=len(languages), data=[LanguageRead.model_validate(item) for item in languages])
