from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence
from uuid import uuid4

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .assistant import ChatRequest, answer, answer_question, print_reply, respond
from .config import AppConfig, load_config
from .notes import filter_notes, list_subjects, load_notes
from .transcript import ChatMessage, append_message, read_messages

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _list_notes(cfg: AppConfig, search: Optional[str], subject: Optional[str]) -> None:
    all_notes = load_notes(cfg)
    notes = filter_notes(all_notes, search=search, subject=subject)
    if not notes:
        console.print("[yellow]No notes found.[/yellow]")
        if all_notes:
            console.print(f"Subjects: {', '.join(list_subjects(all_notes))}")
        return

    table = Table(title=f"{len(notes)} of {len(all_notes)} study notes")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Subject", style="magenta")
    table.add_column("Chars", justify="right")
    for note in notes:
        table.add_row(note.id, note.title, note.subject, str(len(note.content)))
    console.print(table)


def _respond(input_path: Optional[str]) -> None:
    if input_path is None or input_path == "-":
        raw = sys.stdin.read()
    else:
        try:
            raw = Path(input_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SystemExit(f"Could not read request {input_path}: {e}") from e

    try:
        request = ChatRequest.model_validate_json(raw)
    except ValidationError as e:
        raise SystemExit(f"Invalid request:\n{e}") from e

    sys.stdout.write(respond(request).to_json() + "\n")


def _history(cfg: AppConfig, session_id: Optional[str]) -> None:
    if cfg.transcript_path is None:
        raise SystemExit("No transcript_path configured; chat history is not being recorded.")

    try:
        messages = read_messages(cfg.transcript_path, session_id=session_id)
    except (OSError, ValidationError) as e:
        raise SystemExit(f"Could not read transcript {cfg.transcript_path}: {e}") from e

    if not messages:
        console.print("[yellow]No messages recorded.[/yellow]")
        return

    if session_id is None:
        sessions: dict[str, list[ChatMessage]] = {}
        for message in messages:
            sessions.setdefault(message.session_id, []).append(message)

        table = Table(title=f"{len(sessions)} chat sessions")
        table.add_column("Session", style="cyan")
        table.add_column("Messages", justify="right")
        table.add_column("First question")
        table.add_column("Last activity")
        ordered = sorted(sessions.items(), key=lambda item: item[1][-1].created_at, reverse=True)
        for sid, session_messages in ordered:
            first_question = next((m.content for m in session_messages if m.role == "user"), "")
            table.add_row(
                sid,
                str(len(session_messages)),
                first_question,
                session_messages[-1].created_at.isoformat(timespec="seconds"),
            )
        console.print(table)
        return

    console.rule(f"[bold blue]Session {session_id}[/bold blue]")
    for message in sorted(messages, key=lambda m: m.created_at):
        style = "bold" if message.role == "user" else "green"
        console.print(f"[{style}]{message.role}:[/{style}] {escape(message.content)}", highlight=False)
        if message.related_notes:
            console.print(f"  related notes: {', '.join(message.related_notes)}", style="dim")


def _chat(cfg: AppConfig, session_id: Optional[str]) -> None:
    notes = load_notes(cfg)
    session_id = session_id or uuid4().hex
    console.print(
        f"[bold green]Loaded {len(notes)} notes.[/bold green] Type 'exit' or 'quit' to leave. "
        f"(session {session_id})"
    )

    while True:
        try:
            message = console.input("[bold]You:[/bold] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\nExiting chat.")
            break

        if not message:
            continue
        if message.lower() in {"exit", "quit"}:
            console.print("Goodbye.")
            break

        reply = answer(message, notes)
        print_reply(reply, notes)

        if cfg.transcript_path is not None:
            append_message(cfg.transcript_path, ChatMessage(session_id=session_id, role="user", content=message))
            append_message(
                cfg.transcript_path,
                ChatMessage(
                    session_id=session_id,
                    role="assistant",
                    content=reply.text,
                    related_notes=list(reply.related_note_ids),
                ),
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="study-notes",
        description="Study Notes Assistant - answer questions from your study notes by keyword matching.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to a config YAML file (default: config.yaml).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ask_parser = subparsers.add_parser("ask", help="Ask a single question over your notes.")
    ask_parser.add_argument("question", type=str, help="Question to ask over your notes.")

    notes_parser = subparsers.add_parser("notes", help="List the notes that would be searched.")
    notes_parser.add_argument("--search", type=str, default=None, help="Match title, subject or description.")
    notes_parser.add_argument("--subject", type=str, default=None, help="Only notes in this subject ('all' for every subject).")

    respond_parser = subparsers.add_parser(
        "respond",
        help="Answer a JSON request ({message, documents}) and print the JSON response.",
    )
    respond_parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Request file (default: read from stdin).",
    )

    chat_parser = subparsers.add_parser("chat", help="Ask questions interactively.")
    chat_parser.add_argument("--session", type=str, default=None, help="Session id for the transcript.")

    history_parser = subparsers.add_parser("history", help="Show recorded chat sessions or one session's messages.")
    history_parser.add_argument("--session", type=str, default=None, help="Session id to show.")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config(Path(args.config))
    configure_logging(cfg.log_level)

    if args.command == "ask":
        answer_question(args.question, cfg)
    elif args.command == "notes":
        _list_notes(cfg, args.search, args.subject)
    elif args.command == "respond":
        _respond(args.input)
    elif args.command == "chat":
        _chat(cfg, args.session)
    elif args.command == "history":
        _history(cfg, args.session)
    else:  # pragma: no cover - defensive
        parser.print_help()


if __name__ == "__main__":
    main()
