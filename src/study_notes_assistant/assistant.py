from __future__ import annotations

import logging
from textwrap import shorten
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.panel import Panel

from .config import MAX_NOTES_PER_REQUEST, AppConfig, load_config
from .notes import StudyNote, load_notes
from .ranker import rank
from .synthesizer import Reply, synthesize

console = Console()
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    documents: List[StudyNote] = Field(default_factory=list, max_length=MAX_NOTES_PER_REQUEST)
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    related_notes: List[str] = Field(default_factory=list, alias="relatedNotes")

    @classmethod
    def from_reply(cls, reply: Reply) -> "ChatResponse":
        return cls(reply=reply.text, related_notes=list(reply.related_note_ids))

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


def answer(message: str, notes: List[StudyNote]) -> Reply:
    """Rank `notes` against `message` and build the reply."""
    matches = rank(message, notes)
    reply = synthesize(message, matches)
    logger.info("Answered %r with %d related notes", message, len(reply.related_note_ids))
    return reply


def respond(request: ChatRequest) -> ChatResponse:
    return ChatResponse.from_reply(answer(request.message, request.documents))


def print_reply(reply: Reply, notes: List[StudyNote]) -> None:
    console.rule("[bold green]Answer[/bold green]")
    console.print(reply.text)

    if not reply.related_note_ids:
        return

    by_id = {note.id: note for note in notes}
    console.rule("[bold blue]Related Notes[/bold blue]")
    for note_id in reply.related_note_ids:
        note = by_id[note_id]
        preview = shorten(note.content.replace("\n", " "), width=180, placeholder="...") or "(no text)"
        console.print(
            Panel(
                preview,
                title=note.title or note.id,
                subtitle=note.subject,
                expand=False,
            )
        )


def answer_question(question: str, cfg: AppConfig | None = None) -> Reply:
    if cfg is None:
        cfg = load_config()

    notes = load_notes(cfg)
    if not notes:
        console.print("[yellow]No notes loaded. Check notes_dir in your config.[/yellow]")

    reply = answer(question, notes)
    print_reply(reply, notes)
    return reply


__all__ = [
    "ChatRequest",
    "ChatResponse",
    "answer",
    "answer_question",
    "print_reply",
    "respond",
]
