"""Append-only JSON-lines log of chat messages."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class ChatMessage(BaseModel):
    session_id: str
    role: Literal["user", "assistant"]
    content: str
    related_notes: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


def append_message(path: Path, message: ChatMessage) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(message.model_dump_json() + "\n")


def read_messages(path: Path, session_id: str | None = None) -> List[ChatMessage]:
    if not path.exists():
        return []

    messages: List[ChatMessage] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            message = ChatMessage.model_validate_json(line)
            if session_id is None or message.session_id == session_id:
                messages.append(message)
    return messages


__all__ = ["ChatMessage", "append_message", "read_messages"]
