"""User directory, language preferences, connections and avatars."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session, selectinload

from app.api.auth import load_profile
from app.api.deps import get_current_user
from app.config import get_settings
from app.core.storage import resolve_path, store_user_avatar
from app.database import get_db
from app.models import Language, User, UserLearningLanguage, user_connections
from app.schemas import (
    DataResponse,
    LanguagesUpdate,
    ListResponse,
    MessageResponse,
    PagedResponse,
    ProfilePictureUpdate,
    Recommendation,
    UserRead,
    paginate,
)
from app.services.recommendations import recommend_partners

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

_profile_options = (
    selectinload(User.native_languages),
    selectinload(User.learning_languages).selectinload(UserLearningLanguage.language),
)


def _languages_by_id(db: Session, ids: list[int]) -> dict[int, Language]:
    found = {language.id: language for language in db.execute(select(Language).where(Language.id.in_(ids))).scalars()}
    for language_id in ids:
        if language_id not in found:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Language not found with id of {language_id}",
            )
    return found


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User not found with id of {user_id}")
    return user


def _are_connected(db: Session, user_id: int, other_id: int) -> bool:
    stmt = select(user_connections.c.user_id).where(
        user_connections.c.user_id == user_id,
        user_connections.c.connection_id == other_id,
    )
    return db.execute(stmt).first() is not None


@router.get("", response_model=PagedResponse[UserRead])
def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.list_default_limit, ge=1, le=100),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    total = db.execute(select(func.count(User.id))).scalar_one()
    users = list(
        db.execute(
            select(User).options(*_profile_options).order_by(User.id).offset((page - 1) * limit).limit(limit)
        ).scalars()
    )
    return PagedResponse(
        count=len(users),
        total=total,
        pagination=paginate(total, page, limit),
        data=[UserRead.model_validate(user) for user in users],
    )


@router.put("/languages", response_model=DataResponse[UserRead])
def update_languages(
    payload: LanguagesUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace native and/or learning languages; learning order is kept as given."""

    user = load_profile(db, current_user.id)
    if payload.native_languages is not None:
        ids = list(dict.fromkeys(payload.native_languages))
        found = _languages_by_id(db, ids)
        user.native_languages = [found[language_id] for language_id in ids]
    if payload.learning_languages is not None:
        _languages_by_id(db, [entry.language for entry in payload.learning_languages])
        user.learning_languages.clear()
        db.flush()
        for position, entry in enumerate(payload.learning_languages):
            user.learning_languages.append(
                UserLearningLanguage(
                    language_id=entry.language,
                    proficiency=entry.proficiency,
                    position=position,
                )
            )
    db.commit()
    return DataResponse(data=UserRead.model_validate(load_profile(db, current_user.id)))


@router.get("/recommendations", response_model=ListResponse[Recommendation])
def get_recommendations(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user = load_profile(db, current_user.id)
    matches = recommend_partners(db, user, limit=settings.recommendations_limit)
    data = [
        Recommendation(user=UserRead.model_validate(match.user), match_score=match.match_score)
        for match in matches
    ]
    return ListResponse(count=len(data), data=data)


@router.put("/profile-picture", response_model=DataResponse[UserRead])
def update_profile_picture(
    payload: ProfilePictureUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    current_user.profile_picture = payload.profile_picture
    current_user.avatar_path = None
    current_user.avatar_content_type = None
    current_user.avatar_updated_at = None
    db.commit()
    return DataResponse(data=UserRead.model_validate(load_profile(db, current_user.id)))


@router.post("/avatar", response_model=DataResponse[UserRead])
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stored = await store_user_avatar(current_user.id, file)
    current_user.avatar_path = stored.relative_path
    current_user.avatar_content_type = stored.content_type
    current_user.avatar_updated_at = datetime.now(timezone.utc)
    db.commit()
    logger.info("Stored avatar for user %s (%d bytes)", current_user.id, stored.file_size)
    return DataResponse(data=UserRead.model_validate(load_profile(db, current_user.id)))


@router.get("/avatar/{user_id}", response_class=FileResponse)
def get_avatar(user_id: int, db: Session = Depends(get_db)) -> FileResponse:
    user = _get_user_or_404(db, user_id)
    if not user.avatar_path:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Avatar not found")
    return FileResponse(resolve_path(user.avatar_path), media_type=user.avatar_content_type)


@router.get("/connections", response_model=ListResponse[UserRead])
def get_connections(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    stmt = (
        select(User)
        .join(user_connections, user_connections.c.connection_id == User.id)
        .where(user_connections.c.user_id == current_user.id)
        .options(*_profile_options)
        .order_by(User.username)
    )
    connections = list(db.execute(stmt).scalars())
    return ListResponse(count=len(connections), data=[UserRead.model_validate(user) for user in connections])


@router.post("/connections/{user_id}", response_model=MessageResponse)
def add_connection(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Connect both users to each other."""

    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot connect with yourself")
    _get_user_or_404(db, user_id)
    if _are_connected(db, current_user.id, user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already connected with this user")
    db.execute(
        insert(user_connections),
        [
            {"user_id": current_user.id, "connection_id": user_id},
            {"user_id": user_id, "connection_id": current_user.id},
        ],
    )
    db.commit()
    return MessageResponse(message="Connection added successfully")


@router.delete("/connections/{user_id}", response_model=MessageResponse)
def remove_connection(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    db.execute(
        delete(user_connections).where(
            ((user_connections.c.user_id == current_user.id) & (user_connections.c.connection_id == user_id))
            | ((user_connections.c.user_id == user_id) & (user_connections.c.connection_id == current_user.id))
        )
    )
    db.commit()
    return MessageResponse(message="Connection removed successfully")


@router.get("/{user_id}", response_model=DataResponse[UserRead])
def get_user(user_id: int, _: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _get_user_or_404(db, user_id)
    return DataResponse(data=UserRead.model_validate(load_profile(db, user_id)))
