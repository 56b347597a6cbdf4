"""Chat message model persisted per session."""

from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, Field


def now_ms() -> int:
    return int(time.time() * 1000)


class ChatMessage(BaseModel):
    """One turn of a conversation.

    Attributes
    ----------
    role:
        ``"user"`` or ``"bot"``.
    content:
        Message text.
    timestamp:
        Creation time in epoch milliseconds.
    """

    role: Literal["user", "bot"]
    content: str
    timestamp: int = Field(default_factory=now_ms)
