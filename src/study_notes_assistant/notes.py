from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import AppConfig, load_config

logger = logging.getLogger(__name__)

PLAIN_TEXT_SUFFIXES = {".txt", ".md"}
SIDECAR_SUFFIXES = {".yaml", ".yml"}
FRONT_MATTER_DELIMITER = "---"
ALL_SUBJECTS = "all"

# YAML and JSON scalars that load as something other than text.
SCALAR_TYPES = (int, float, date)


class StudyNote(BaseModel):
    """A single study note as stored by the notes store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = ""
    subject: str = ""
    body: str = Field(default="", alias="content_text")
    description: str = ""

    @field_validator("id", "title", "subject", "body", "description", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, SCALAR_TYPES):
            return str(value)
        return value

    @property
    def content(self) -> str:
        """Body text, or the description when no text was extracted."""
        return self.body or self.description


def split_front_matter(text: str) -> Tuple[dict, str]:
    """Split an optional leading YAML front-matter block from `text`."""
    cleaned = text.replace("\r\n", "\n")
    lines = cleaned.split("\n")
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, cleaned

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_DELIMITER:
            meta = yaml.safe_load("\n".join(lines[1:end])) or {}
            if not isinstance(meta, dict):
                logger.warning("Ignoring non-mapping front matter")
                meta = {}
            return meta, "\n".join(lines[end + 1 :])

    # Unterminated block: treat the whole file as body.
    return {}, cleaned


def _default_subject(path: Path, notes_dir: Path) -> str:
    parent = path.parent.relative_to(notes_dir)
    if parent == Path("."):
        return "General"
    return parent.as_posix()


def _note_from_meta(meta: dict, path: Path, notes_dir: Path, body: str) -> StudyNote:
    return StudyNote(
        id=str(meta.get("id") or path.relative_to(notes_dir).as_posix()),
        title=meta.get("title") or path.stem,
        subject=meta.get("subject") or _default_subject(path, notes_dir),
        body=body.strip(),
        description=meta.get("description") or "",
    )


def load_plain_text_note(path: Path, notes_dir: Path) -> StudyNote:
    meta, body = split_front_matter(path.read_text(encoding="utf-8"))
    return _note_from_meta(meta, path, notes_dir, body)


def load_unsupported_note(path: Path, notes_dir: Path) -> StudyNote:
    """Record a non-plain-text file with metadata only; its body stays empty."""
    meta: dict = {}
    for suffix in sorted(SIDECAR_SUFFIXES):
        sidecar = path.with_name(path.name + suffix)
        if sidecar.exists():
            meta = yaml.safe_load(sidecar.read_text(encoding="utf-8")) or {}
            break
    if not isinstance(meta, dict):
        logger.warning("Ignoring non-mapping metadata for %s", path)
        meta = {}
    logger.warning("Text extraction for %s files is not yet supported: %s", path.suffix or "extensionless", path)
    return _note_from_meta(meta, path, notes_dir, "")


def _is_sidecar(path: Path) -> bool:
    return path.suffix.lower() in SIDECAR_SUFFIXES and path.with_suffix("").suffix != ""


def _is_hidden(path: Path, notes_dir: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(notes_dir).parts)


def iter_note_files(notes_dir: Path) -> Iterable[Path]:
    for path in sorted(notes_dir.rglob("*")):
        if not path.is_file() or _is_hidden(path, notes_dir):
            continue
        if _is_sidecar(path):
            continue
        yield path


def load_notes_file(path: Path, limit: int | None = None) -> List[StudyNote]:
    """Load notes from a JSON or YAML export (a list of note records)."""
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            records = json.loads(text)
        else:
            records = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as e:
        raise SystemExit(f"Could not read notes file {path}: {e}") from e

    records = records or []
    if not isinstance(records, list):
        raise SystemExit(f"Expected a list of notes in {path}, got {type(records).__name__}")

    try:
        notes = [StudyNote.model_validate(record) for record in records[:limit]]
    except ValidationError as e:
        raise SystemExit(f"Invalid note record in {path}:\n{e}") from e

    logger.info("Loaded %d notes from %s", len(notes), path)
    return notes


def load_notes(cfg: AppConfig | None = None) -> List[StudyNote]:
    """Load up to `cfg.max_notes` notes from the configured notes file or directory."""
    if cfg is None:
        cfg = load_config()

    if cfg.notes_file is not None:
        return load_notes_file(cfg.notes_file, limit=cfg.max_notes)

    notes_dir = cfg.notes_dir_resolved
    if not notes_dir.is_dir():
        logger.warning("Notes directory not found: %s", notes_dir)
        return []

    notes: List[StudyNote] = []
    for path in iter_note_files(notes_dir):
        if len(notes) >= cfg.max_notes:
            logger.info("Note limit of %d reached; remaining files skipped", cfg.max_notes)
            break
        try:
            if path.suffix.lower() in PLAIN_TEXT_SUFFIXES:
                notes.append(load_plain_text_note(path, notes_dir))
            else:
                notes.append(load_unsupported_note(path, notes_dir))
        except (OSError, UnicodeDecodeError, yaml.YAMLError, ValidationError) as exc:
            logger.error("Failed to load %s: %s", path, exc)

    logger.info("Loaded %d notes from %s", len(notes), notes_dir)
    return notes


def list_subjects(notes: Iterable[StudyNote]) -> List[str]:
    """Distinct subjects in first-seen order."""
    return list(dict.fromkeys(note.subject for note in notes))


def filter_notes(
    notes: Iterable[StudyNote],
    search: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[StudyNote]:
    """Keep notes whose title, subject or description contains `search`
    (case-insensitive) and whose subject equals `subject` exactly; `"all"` matches every subject."""
    term = (search or "").lower()
    return [
        note
        for note in notes
        if (term in note.title.lower() or term in note.subject.lower() or term in note.description.lower())
        and (subject in (None, ALL_SUBJECTS) or note.subject == subject)
    ]


__all__ = [
    "StudyNote",
    "filter_notes",
    "list_subjects",
    "load_notes",
    "load_notes_file",
    "split_front_matter",
]
