"""Message ORM model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, IdMixin

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


class Message(Base, IdMixin):
    """One stored unit of a conversation: a user message or one assistant chunk.

    Rows are append-only. ``id`` is the authoritative insertion order; chunks of
    one assistant reply share the ``group_id`` of the user message they answer.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_id_id", "conversation_id", "id"),
        Index("ix_messages_conversation_group", "conversation_id", "group_id"),
        Index(
            "uq_messages_conversation_user_group",
            "conversation_id",
            "group_id",
            unique=True,
            postgresql_where=text("role = 'user'"),
            sqlite_where=text("role = 'user'"),
        ),
    )

    conversation_id: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    group_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
