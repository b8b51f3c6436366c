"""Voice room CRUD and participant transitions.

Every transition reloads the room with ``SELECT ... FOR UPDATE``, applies one
state change from :mod:`parley.voice.state` and commits, so concurrent joins
cannot both pass the capacity check.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_current_user
from app.config import get_settings
from app.core.security import get_password_hash, verify_password
from app.database import get_db
from app.models import Language, User, VoiceRoom, VoiceRoomParticipant, VoiceRoomTopic, voice_room_languages
from app.monitoring.metrics import voice_room_transitions_total
from app.schemas import (
    DataResponse,
    DeafenState,
    EmptyResponse,
    JoinRequest,
    MuteState,
    PagedResponse,
    VoiceRoomCreate,
    VoiceRoomRead,
    VoiceRoomUpdate,
    paginate,
)
from parley.voice import state
from parley.voice.state import VoiceRoomError

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()

_read_options = (
    selectinload(VoiceRoom.host),
    selectinload(VoiceRoom.participants).selectinload(VoiceRoomParticipant.user),
    selectinload(VoiceRoom.languages),
    selectinload(VoiceRoom.recordings),
)


def _password_matches(stored: str | None, supplied: str) -> bool:
    return verify_password(supplied, stored)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _not_found(room_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Voice room not found with id of {room_id}",
    )


def _load_room(db: Session, room_id: int) -> VoiceRoom:
    room = db.execute(
        select(VoiceRoom).where(VoiceRoom.id == room_id).options(*_read_options)
    ).scalar_one_or_none()
    if room is None:
        raise _not_found(room_id)
    return room


def _lock_room(db: Session, room_id: int) -> VoiceRoom:
    room = db.execute(
        select(VoiceRoom)
        .where(VoiceRoom.id == room_id)
        .with_for_update()
        .options(selectinload(VoiceRoom.participants))
    ).scalar_one_or_none()
    if room is None:
        raise _not_found(room_id)
    return room


@contextmanager
def _transition(db: Session, room_id: int, name: str) -> Iterator[VoiceRoom]:
    """Yield the locked room; commit on success, roll back and map domain errors."""

    room = _lock_room(db, room_id)
    try:
        yield room
    except VoiceRoomError as exc:
        db.rollback()
        voice_room_transitions_total.labels(name, type(exc).__name__).inc()
        logger.info("Voice room %s %s rejected: %s", room_id, name, exc.detail)
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    db.commit()
    voice_room_transitions_total.labels(name, "ok").inc()


def _languages(db: Session, ids: list[int]) -> list[Language]:
    unique_ids = list(dict.fromkeys(ids))
    found = {language.id: language for language in db.execute(select(Language).where(Language.id.in_(unique_ids))).scalars()}
    missing = [language_id for language_id in unique_ids if language_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language not found with id of {missing[0]}",
        )
    return [found[language_id] for language_id in unique_ids]


def _read(db: Session, room_id: int) -> VoiceRoomRead:
    db.expire_all()
    return VoiceRoomRead.model_validate(_load_room(db, room_id))


@router.get("", response_model=PagedResponse[VoiceRoomRead])
def list_voice_rooms(
    topic: VoiceRoomTopic | None = None,
    is_active: bool | None = None,
    language_id: int | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.list_default_limit, ge=1, le=100),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    stmt = select(VoiceRoom)
    if topic is not None:
        stmt = stmt.where(VoiceRoom.topic == topic)
    if is_active is not None:
        stmt = stmt.where(VoiceRoom.is_active.is_(is_active))
    if language_id is not None:
        stmt = stmt.where(
            VoiceRoom.id.in_(
                select(voice_room_languages.c.voice_room_id).where(
                    voice_room_languages.c.language_id == language_id
                )
            )
        )
    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    rooms = list(
        db.execute(
            stmt.options(*_read_options)
            .order_by(VoiceRoom.created_at.desc(), VoiceRoom.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars()
    )
    return PagedResponse(
        count=len(rooms),
        total=total,
        pagination=paginate(total, page, limit),
        data=[VoiceRoomRead.model_validate(room) for room in rooms],
    )


@router.post("", response_model=DataResponse[VoiceRoomRead], status_code=status.HTTP_201_CREATED)
def create_voice_room(
    payload: VoiceRoomCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Open a room with the caller as host and first participant."""

    room = VoiceRoom(
        name=payload.name,
        description=payload.description,
        host_id=current_user.id,
        is_private=payload.is_private,
        password=get_password_hash(payload.password) if payload.password else None,
        max_participants=payload.max_participants or settings.voice_room_default_capacity,
        topic=payload.topic,
        is_active=True,
        start_time=_now(),
    )
    room.languages = _languages(db, payload.languages)
    room.add_participant(current_user.id, _now())
    db.add(room)
    db.commit()
    logger.info("User %s opened voice room %s", current_user.id, room.id)
    return DataResponse(data=_read(db, room.id))


@router.get("/{room_id}", response_model=DataResponse[VoiceRoomRead])
def get_voice_room(room_id: int, _: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return DataResponse(data=VoiceRoomRead.model_validate(_load_room(db, room_id)))


@router.put("/{room_id}", response_model=DataResponse[VoiceRoomRead])
def update_voice_room(
    room_id: int,
    payload: VoiceRoomUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit room settings; host and participants are never taken from the body."""

    with _transition(db, room_id, "update") as room:
        state.ensure_host(room, current_user.id)
        changes = payload.model_dump(exclude_unset=True)
        if "languages" in changes:
            room.languages = _languages(db, changes.pop("languages") or [])
        if "password" in changes:
            password = changes.pop("password")
            room.password = get_password_hash(password) if password else None
        if changes.get("max_participants") is not None and changes["max_participants"] < len(room.participants):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Capacity cannot be lower than the current participant count",
            )
        for field, value in changes.items():
            if value is None and field in ("name", "is_private", "max_participants", "topic"):
                continue
            setattr(room, field, value)
        if room.is_private and not room.password:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Private rooms require a password")
    return DataResponse(data=_read(db, room_id))


@router.delete("/{room_id}", response_model=EmptyResponse)
def delete_voice_room(
    room_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EmptyResponse:
    with _transition(db, room_id, "delete") as room:
        state.ensure_host(room, current_user.id)
        db.delete(room)
    return EmptyResponse()


@router.post("/{room_id}/join", response_model=DataResponse[VoiceRoomRead])
def join_voice_room(
    room_id: int,
    payload: JoinRequest | None = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    password = payload.password if payload is not None else None
    with _transition(db, room_id, "join") as room:
        state.join(
            room,
            current_user.id,
            password=password,
            now=_now(),
            password_matches=_password_matches,
        )
    return DataResponse(data=_read(db, room_id))


@router.post("/{room_id}/leave", response_model=DataResponse[VoiceRoomRead])
def leave_voice_room(
    room_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with _transition(db, room_id, "leave") as room:
        state.leave(room, current_user.id, now=_now())
    return DataResponse(data=_read(db, room_id))


@router.post("/{room_id}/toggle-mute", response_model=DataResponse[MuteState])
def toggle_mute(
    room_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with _transition(db, room_id, "toggle_mute") as room:
        participant = state.toggle_mute(room, current_user.id)
        result = MuteState(is_muted=participant.is_muted)
    return DataResponse(data=result)


@router.post("/{room_id}/toggle-deafen", response_model=DataResponse[DeafenState])
def toggle_deafen(
    room_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with _transition(db, room_id, "toggle_deafen") as room:
        participant = state.toggle_deafen(room, current_user.id)
        result = DeafenState(is_deafened=participant.is_deafened, is_muted=participant.is_muted)
    return DataResponse(data=result)
