"""Group id assignment for inbound user messages."""

from __future__ import annotations

import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.message import Message

_LOCK_STRIPES = 64
_conversation_locks = [Lock() for _ in range(_LOCK_STRIPES)]


def next_group_id(db: Session, conversation_id: str) -> int:
    """Return one more than the highest stored group id, or 1 for a new conversation.

    Read errors propagate; callers must not fall back to 1.
    """

    current = db.scalar(
        select(func.max(Message.group_id)).where(Message.conversation_id == conversation_id)
    )
    return int(current) + 1 if current else 1


@contextmanager
def conversation_lock(conversation_id: str) -> Iterator[None]:
    """Serialize group assignment and chunk inserts for one conversation in this process."""

    lock = _conversation_locks[zlib.crc32(conversation_id.encode("utf-8")) % _LOCK_STRIPES]
    with lock:
        yield
