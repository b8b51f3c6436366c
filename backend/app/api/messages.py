"""HTTP endpoints for conversations and their messages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.config import get_settings
from app.database import get_db
from app.models import Conversation, Language, User
from app.schemas import (
    ConversationCreate,
    ConversationRead,
    ConversationSummary,
    DataResponse,
    EmptyResponse,
    ListResponse,
    MessageCreate,
    MessageRead,
    PublicUser,
)
from app.services import conversations as service

router = APIRouter()

settings = get_settings()


def _summary(conversation: Conversation, viewer_id: int) -> ConversationSummary:
    summary = ConversationSummary.model_validate(conversation)
    other = None
    if not conversation.is_group and len(conversation.participants) == 2:
        other = next(
            (user for user in conversation.participant_users if user.id != viewer_id),
            None,
        )
    return summary.model_copy(
        update={
            "my_unread_count": conversation.unread_count.get(viewer_id, 0),
            "other_participant": PublicUser.model_validate(other) if other is not None else None,
        }
    )


@router.get("/conversations", response_model=ListResponse[ConversationSummary])
def list_conversations(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    conversations = service.list_conversations(db, current_user.id)
    data = [_summary(conversation, current_user.id) for conversation in conversations]
    return ListResponse(count=len(data), data=data)


@router.post(
    "/conversations",
    response_model=DataResponse[ConversationRead],
    status_code=status.HTTP_201_CREATED,
)
def create_conversation(
    payload: ConversationCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a group, or return the existing direct conversation for a pair."""

    conversation, created = service.get_or_create_conversation(
        db,
        current_user,
        payload.participants,
        is_group=payload.is_group,
        name=payload.name,
        main_language_id=payload.main_language,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return DataResponse(data=ConversationRead.model_validate(conversation))


@router.get("/{conversation_id}", response_model=ListResponse[MessageRead])
def get_messages(
    conversation_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.messages_default_limit, ge=1, le=settings.messages_max_limit),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return one page of history and mark the conversation read for the caller.

    Every unread message from other senders is flagged, not only the ones on
    the requested page.
    """

    conversation = service.load_conversation(db, conversation_id)
    service.require_participant(conversation, current_user.id)
    messages = service.fetch_page(db, conversation.id, page=page, limit=limit)
    data = [MessageRead.model_validate(message) for message in messages]
    service.mark_conversation_read(db, conversation, current_user.id)
    return ListResponse(count=len(data), data=data)


@router.post(
    "/{conversation_id}",
    response_model=DataResponse[MessageRead],
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    conversation_id: int,
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if len(payload.content) > settings.message_max_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Message cannot be longer than {settings.message_max_length} characters",
        )
    conversation = service.load_conversation(db, conversation_id)
    service.require_participant(conversation, current_user.id)
    if payload.original_language is not None and db.get(Language, payload.original_language) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language not found with id of {payload.original_language}",
        )
    message = service.record_message(
        db,
        conversation,
        current_user,
        payload.content,
        original_language_id=payload.original_language,
        attachments=payload.attachments,
    )
    return DataResponse(data=MessageRead.model_validate(message))


@router.delete("/{message_id}", response_model=EmptyResponse)
def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EmptyResponse:
    service.delete_message(db, message_id, current_user.id)
    return EmptyResponse()
