"""Conversation lookup and unread bookkeeping.

Unread state lives on two tables: the per-participant counter on
``conversation_participants`` and the ``read`` flag on ``messages``. Sending
bumps the counters with one UPDATE; reading flips the flags and zeroes the
reader's counter in the same commit, so neither is seen without the other.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.models import (
    Conversation,
    ConversationParticipant,
    Language,
    Message,
    MessageTranslation,
    User,
    direct_key_for,
)

logger = logging.getLogger(__name__)

NOT_PARTICIPANT = "Not authorized to access this conversation"

_conversation_options = (
    selectinload(Conversation.participants).selectinload(ConversationParticipant.user),
    selectinload(Conversation.main_language),
    selectinload(Conversation.last_message),
)


def message_options():
    return (
        selectinload(Message.sender),
        selectinload(Message.original_language),
        selectinload(Message.translations).selectinload(MessageTranslation.language),
        selectinload(Message.translations).selectinload(MessageTranslation.corrected_by),
        selectinload(Message.reactions),
    )


def load_conversation(db: Session, conversation_id: int) -> Conversation:
    conversation = db.execute(
        select(Conversation)
        .where(Conversation.id == conversation_id)
        .options(*_conversation_options)
    ).scalar_one_or_none()
    if conversation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Conversation not found with id of {conversation_id}",
        )
    return conversation


def require_participant(conversation: Conversation, user_id: int) -> None:
    if not conversation.has_user(user_id):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_PARTICIPANT)


def list_conversations(db: Session, user_id: int) -> list[Conversation]:
    stmt = (
        select(Conversation)
        .join(ConversationParticipant, ConversationParticipant.conversation_id == Conversation.id)
        .where(ConversationParticipant.user_id == user_id)
        .options(*_conversation_options)
        .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
    )
    return list(db.execute(stmt).scalars().unique())


def _resolve_users(db: Session, user_ids: Iterable[int]) -> list[User]:
    ids = list(dict.fromkeys(user_ids))
    users = {user.id: user for user in db.execute(select(User).where(User.id.in_(ids))).scalars()}
    missing = [user_id for user_id in ids if user_id not in users]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found with id of {missing[0]}",
        )
    return [users[user_id] for user_id in ids]


def _find_direct(db: Session, key: str) -> Conversation | None:
    return db.execute(
        select(Conversation).where(Conversation.direct_key == key).options(*_conversation_options)
    ).scalar_one_or_none()


def get_or_create_conversation(
    db: Session,
    creator: User,
    participant_ids: Iterable[int],
    *,
    is_group: bool = False,
    name: str | None = None,
    main_language_id: int | None = None,
) -> tuple[Conversation, bool]:
    """Return ``(conversation, created)``.

    A two-person, non-group request always resolves to the single direct
    conversation for that pair. Groups need a name and make the creator the
    admin. Every participant starts with an unread counter of zero.
    """

    ordered = list(dict.fromkeys([*participant_ids, creator.id]))
    users = _resolve_users(db, ordered)

    if is_group and not (name and name.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please add a name for the group conversation",
        )
    if not is_group and len(users) != 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Direct conversations need exactly one other participant",
        )
    if main_language_id is not None and db.get(Language, main_language_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language not found with id of {main_language_id}",
        )

    key = None if is_group else direct_key_for(users[0].id, users[1].id)
    if key is not None:
        existing = _find_direct(db, key)
        if existing is not None:
            return existing, False

    conversation = Conversation(
        direct_key=key,
        is_group=is_group,
        name=name.strip() if is_group and name else None,
        group_admin_id=creator.id if is_group else None,
        main_language_id=main_language_id,
    )
    conversation.participants = [
        ConversationParticipant(user_id=user.id, unread_count=0) for user in users
    ]
    db.add(conversation)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the same direct pair first.
        db.rollback()
        if key is None:
            raise
        existing = _find_direct(db, key)
        if existing is None:
            raise
        return existing, False
    logger.info("Created conversation %s with %d participants", conversation.id, len(users))
    return load_conversation(db, conversation.id), True


def record_message(
    db: Session,
    conversation: Conversation,
    sender: User,
    content: str,
    *,
    original_language_id: int | None = None,
    attachments: list | None = None,
) -> Message:
    """Persist a message, point ``last_message`` at it and bump the other counters."""

    require_participant(conversation, sender.id)
    message = Message(
        conversation_id=conversation.id,
        sender_id=sender.id,
        content=content,
        original_language_id=original_language_id,
        attachments=list(attachments or []),
        read=False,
    )
    db.add(message)
    db.flush()

    conversation.last_message = message
    db.execute(
        update(ConversationParticipant)
        .where(
            ConversationParticipant.conversation_id == conversation.id,
            ConversationParticipant.user_id != sender.id,
        )
        .values(unread_count=ConversationParticipant.unread_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return load_message(db, message.id)


def load_message(db: Session, message_id: int) -> Message:
    message = db.execute(
        select(Message).where(Message.id == message_id).options(*message_options())
    ).scalar_one_or_none()
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Message not found with id of {message_id}",
        )
    return message


def fetch_page(db: Session, conversation_id: int, *, page: int, limit: int) -> list[Message]:
    """Return one page counted from the newest message, ordered oldest first."""

    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .options(*message_options())
        .order_by(Message.created_at.desc(), Message.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    messages = list(db.execute(stmt).scalars())
    messages.reverse()
    return messages


def mark_conversation_read(db: Session, conversation: Conversation, reader_id: int) -> int:
    """Flag every unread message from other senders and zero the reader's counter.

    Both updates share one commit. Returns the number of messages flagged.
    """

    result = db.execute(
        update(Message)
        .where(
            Message.conversation_id == conversation.id,
            Message.sender_id != reader_id,
            Message.read.is_(False),
        )
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    db.execute(
        update(ConversationParticipant)
        .where(
            ConversationParticipant.conversation_id == conversation.id,
            ConversationParticipant.user_id == reader_id,
        )
        .values(unread_count=0)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


def delete_message(db: Session, message_id: int, user_id: int) -> None:
    message = db.get(Message, message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Message not found with id of {message_id}",
        )
    if message.sender_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to delete this message",
        )
    db.execute(
        update(Conversation)
        .where(Conversation.last_message_id == message.id)
        .values(last_message_id=None)
        .execution_options(synchronize_session=False)
    )
    db.delete(message)
    db.commit()
