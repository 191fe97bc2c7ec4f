"""Message log persistence: append-only inserts and ordered scans."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.message import ROLE_USER, Message
from app.services.grouping import next_group_id

logger = logging.getLogger(__name__)

GROUP_ASSIGNMENT_ATTEMPTS = 3


class GroupAssignmentError(RuntimeError):
    """Raised when a unique group id could not be claimed for a user message."""


def create_message(
    db: Session,
    conversation_id: str,
    *,
    role: str,
    content: str,
    group_id: int,
    created_at: datetime | None = None,
) -> Message:
    """Append one row and commit it."""

    message = Message(
        conversation_id=conversation_id,
        role=role,
        content=content,
        group_id=group_id,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def create_user_message(db: Session, conversation_id: str, content: str) -> Message:
    """Persist a user message under the next free group id.

    A concurrent writer in another process can claim the same group id first;
    the unique index rejects the duplicate and the id is recomputed.
    """

    for attempt in range(1, GROUP_ASSIGNMENT_ATTEMPTS + 1):
        group_id = next_group_id(db, conversation_id)
        try:
            return create_message(
                db,
                conversation_id,
                role=ROLE_USER,
                content=content,
                group_id=group_id,
            )
        except IntegrityError:
            db.rollback()
            logger.warning(
                "messages.group_id_conflict conversation_id=%s group_id=%d attempt=%d",
                conversation_id,
                group_id,
                attempt,
            )
    raise GroupAssignmentError(
        f"Could not assign a group id for conversation {conversation_id} "
        f"after {GROUP_ASSIGNMENT_ATTEMPTS} attempts."
    )


def list_messages(db: Session, conversation_id: str) -> list[Message]:
    """Return the conversation's rows in insertion order."""

    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.id.asc())
    )
    return list(db.scalars(stmt).all())
