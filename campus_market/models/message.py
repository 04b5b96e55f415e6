from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single line in the public chat room."""

    id: str
    username: str
    message: str
    user_id: Optional[str] = None
    created_at: datetime


class ChatMessageCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=2, max_length=50)
    message: str = Field(..., min_length=1, max_length=1000)
