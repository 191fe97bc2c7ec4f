"""Logical turn schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TurnRead(BaseModel):
    """One logical turn of the reconstructed history."""

    model_config = ConfigDict(from_attributes=True)

    role: Literal["user", "assistant"]
    content: str
    group_id: int | None = None
    created_at: datetime
    chunk_count: int = Field(default=1, ge=1)
