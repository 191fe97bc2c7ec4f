"""ORM models package exports."""

from app.models.message import ROLE_ASSISTANT, ROLE_USER, Message

__all__ = ["Message", "ROLE_USER", "ROLE_ASSISTANT"]
