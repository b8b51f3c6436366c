"""Language catalogue endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.database import get_db
from app.models import Language, User
from app.schemas import (
    DataResponse,
    EmptyResponse,
    LanguageCreate,
    LanguageRead,
    LanguageUpdate,
    ListResponse,
)

router = APIRouter()


def list_all(db: Session) -> list[Language]:
    return list(db.execute(select(Language).order_by(Language.name)).scalars())


def _get_or_404(db: Session, language_id: int) -> Language:
    language = db.get(Language, language_id)
    if language is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language not found with id of {language_id}",
        )
    return language


def _ensure_unique(db: Session, *, code: str | None, name: str | None, exclude_id: int | None = None) -> None:
    clauses = []
    if code is not None:
        clauses.append(Language.code == code)
    if name is not None:
        clauses.append(Language.name == name)
    if not clauses:
        return
    stmt = select(Language.id).where(or_(*clauses))
    if exclude_id is not None:
        stmt = stmt.where(Language.id != exclude_id)
    if db.execute(stmt.limit(1)).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A language with this code or name already exists",
        )


@router.get("", response_model=ListResponse[LanguageRead])
def list_languages(db: Session = Depends(get_db)):
    languages = list_all(db)
    return ListResponse(count=len(languages), data=[LanguageRead.model_validate(item) for item in languages])


@router.get("/{language_id}", response_model=DataResponse[LanguageRead])
def get_language(language_id: int, db: Session = Depends(get_db)):
    return DataResponse(data=LanguageRead.model_validate(_get_or_404(db, language_id)))


@router.post("", response_model=DataResponse[LanguageRead], status_code=status.HTTP_201_CREATED)
def create_language(
    payload: LanguageCreate,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _ensure_unique(db, code=payload.code, name=payload.name)
    language = Language(**payload.model_dump())
    db.add(language)
    db.commit()
    db.refresh(language)
    return DataResponse(data=LanguageRead.model_validate(language))


@router.put("/{language_id}", response_model=DataResponse[LanguageRead])
def update_language(
    language_id: int,
    payload: LanguageUpdate,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    language = _get_or_404(db, language_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    _ensure_unique(db, code=changes.get("code"), name=changes.get("name"), exclude_id=language.id)
    for field, value in changes.items():
        setattr(language, field, value)
    db.commit()
    db.refresh(language)
    return DataResponse(data=LanguageRead.model_validate(language))


@router.delete("/{language_id}", response_model=EmptyResponse)
def delete_language(
    language_id: int,
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EmptyResponse:
    db.delete(_get_or_404(db, language_id))
    db.commit()
    return EmptyResponse()
