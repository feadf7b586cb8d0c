"""Keyword-overlap relevance ranking over study notes.

All functions here are pure; the corpus is passed in already loaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .notes import StudyNote

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3
WHOLE_QUERY_BONUS = 5
TOP_K = 3


@dataclass(frozen=True)
class ScoredNote:
    note: StudyNote
    score: int


def tokenize(query: str) -> List[str]:
    """Lower-cased whitespace tokens longer than two characters, deduplicated in order."""
    tokens = [word for word in query.lower().split() if len(word) >= MIN_TOKEN_LENGTH]
    return list(dict.fromkeys(tokens))


def note_surface(note: StudyNote) -> str:
    """Searchable text for a note: title, subject, content and description."""
    return " ".join([note.title, note.subject, note.content, note.description]).lower()


def score_note(query: str, note: StudyNote) -> int:
    surface = note_surface(note)
    score = sum(1 for token in tokenize(query) if token in surface)

    # A blank query counts as the empty string, which every surface contains.
    query_lower = query.lower()
    if not query_lower.strip() or query_lower in surface:
        score += WHOLE_QUERY_BONUS
    return score


def score_notes(query: str, notes: Iterable[StudyNote]) -> List[ScoredNote]:
    return [ScoredNote(note=note, score=score_note(query, note)) for note in notes]


def rank(query: str, notes: Sequence[StudyNote], top_k: int = TOP_K) -> List[StudyNote]:
    """Return up to `top_k` notes with a positive score, best first.

    `sorted` is stable, so notes with equal scores keep their input order.
    """
    scored = [item for item in score_notes(query, notes) if item.score > 0]
    scored = sorted(scored, key=lambda item: item.score, reverse=True)
    ranked = [item.note for item in scored[:top_k]]

    logger.debug(
        "Ranked %d of %d notes for %r: %s",
        len(ranked),
        len(notes),
        query,
        [(item.note.id, item.score) for item in scored[:top_k]],
    )
    return ranked


__all__ = [
    "ScoredNote",
    "TOP_K",
    "WHOLE_QUERY_BONUS",
    "note_surface",
    "rank",
    "score_note",
    "score_notes",
    "tokenize",
]
