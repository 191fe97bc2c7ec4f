"""Reassembly of stored chunks into the logical turns shown to the client."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.orm import Session

from app.models.message import ROLE_ASSISTANT, ROLE_USER
from app.services.messages import list_messages

logger = logging.getLogger(__name__)


class StoredRecord(Protocol):
    """Fields the reconstructor reads from a stored row."""

    role: str
    content: str
    group_id: int
    created_at: datetime | None


@dataclass(slots=True)
class LogicalTurn:
    """A user message, or an assistant reply merged from consecutive chunks."""

    role: str
    content: str
    created_at: datetime
    group_id: int | None = None
    chunk_count: int = 1


def reconstruct_history(
    records: Iterable[StoredRecord],
    *,
    now: datetime | None = None,
) -> list[LogicalTurn]:
    """Merge consecutive same-group assistant chunks into single turns.

    ``records`` must already be in insertion order. A user record always closes
    the pending assistant run, so two runs sharing a group id but separated by a
    user message stay apart. ``now`` stamps a run with no later record to borrow
    a timestamp from; it defaults to the current UTC time. Naive row timestamps
    (SQLite drops the offset) are read as UTC so every turn carries an aware time.
    """

    fallback = _as_utc(now) if now else datetime.now(timezone.utc)
    turns: list[LogicalTurn] = []
    buffer: list[StoredRecord] = []
    last_role: str | None = None
    current_group: int | None = None

    def flush(created_at: datetime | None) -> None:
        turns.append(
            LogicalTurn(
                role=ROLE_ASSISTANT,
                content="".join(chunk.content for chunk in buffer),
                created_at=_as_utc(created_at) if created_at else fallback,
                group_id=current_group,
                chunk_count=len(buffer),
            )
        )
        buffer.clear()

    for record in records:
        if record.role == ROLE_USER:
            if buffer:
                flush(buffer[-1].created_at)
            turns.append(
                LogicalTurn(
                    role=ROLE_USER,
                    content=record.content,
                    created_at=_as_utc(record.created_at) if record.created_at else fallback,
                    group_id=record.group_id,
                )
            )
            last_role = ROLE_USER
            current_group = record.group_id
            continue

        if last_role == ROLE_USER or record.group_id != current_group:
            # Starts a new run; the previous run borrows this record's timestamp.
            if buffer:
                flush(record.created_at)
        buffer.append(record)
        last_role = ROLE_ASSISTANT
        current_group = record.group_id

    if buffer:
        flush(fallback)
    return turns


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def load_history(db: Session, conversation_id: str) -> list[LogicalTurn]:
    """Read a conversation's log and return its logical turns."""

    records = list_messages(db, conversation_id)
    turns = reconstruct_history(records)
    logger.info(
        "history.read conversation_id=%s records=%d turns=%d",
        conversation_id,
        len(records),
        len(turns),
    )
    return turns
