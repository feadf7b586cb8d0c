"""Templated reply synthesis from ranked study notes.

Intent selection is a first-match walk over an ordered tuple of rules, so the
priority between intents is the order of the tuple and nothing else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .notes import StudyNote
from .ranker import tokenize

logger = logging.getLogger(__name__)

MAX_EXCERPT_LINES = 10
FALLBACK_EXCERPT_LINES = 15

GREETING_REPLY = (
    "Hello! I'm your AI study assistant. I can help you with questions about your study notes. "
    "What would you like to learn about today?"
)
HELP_REPLY = (
    "I can help you with:\n\n"
    "• Explaining concepts from your study notes\n"
    "• Answering questions about specific topics\n"
    "• Providing examples and clarifications\n"
    "• Comparing different concepts\n"
    "• Breaking down complex topics\n\n"
    "Just ask me anything related to your study materials!"
)
THANKS_REPLY = "You're welcome! Feel free to ask if you have more questions about your study materials."
NOT_FOUND_REPLY = (
    "I couldn't find specific information about that in your current study notes. "
    "Could you try rephrasing your question or asking about a different topic that's covered "
    "in your uploaded materials?"
)

# (query, matched notes, excerpt) -> reply text
NoteTemplate = Callable[[str, Sequence[StudyNote], str], str]


@dataclass(frozen=True)
class Reply:
    text: str
    related_note_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class IntentRule:
    """Select `template` when the lower-cased query contains any of `keywords`."""

    name: str
    keywords: Tuple[str, ...]
    template: NoteTemplate

    def matches(self, query: str) -> bool:
        query_lower = query.lower()
        return any(keyword in query_lower for keyword in self.keywords)


def _titles(notes: Sequence[StudyNote]) -> str:
    return ", ".join(note.title for note in notes)


def _explanatory(query: str, notes: Sequence[StudyNote], excerpt: str) -> str:
    subjects = ", ".join(note.subject for note in notes)
    return (
        f"Based on the study notes in {subjects}, here's what I found:\n\n{excerpt}\n\n"
        f"The information above is from the following notes: {_titles(notes)}. "
        "Would you like me to elaborate on any specific aspect?"
    )


def _procedural(query: str, notes: Sequence[StudyNote], excerpt: str) -> str:
    return (
        f"Here's how to approach this based on your study materials:\n\n{excerpt}\n\n"
        f"This information comes from: {_titles(notes)}. Let me know if you need more details on any step!"
    )


def _comparison(query: str, notes: Sequence[StudyNote], excerpt: str) -> str:
    return (
        f"Let me help you understand the differences:\n\n{excerpt}\n\n"
        f"Reference materials: {_titles(notes)}. "
        "Would you like me to explain any particular difference in more detail?"
    )


def _example(query: str, notes: Sequence[StudyNote], excerpt: str) -> str:
    return (
        f"Here are some relevant examples from your study notes:\n\n{excerpt}\n\n"
        f"These examples are from: {_titles(notes)}. Need more examples?"
    )


def _generic(query: str, notes: Sequence[StudyNote], excerpt: str) -> str:
    return (
        f"Based on your study notes ({_titles(notes)}), here's what I found:\n\n{excerpt}\n\n"
        "Feel free to ask follow-up questions for clarification!"
    )


def _fixed(text: str) -> NoteTemplate:
    return lambda query, notes, excerpt: text


NOTE_INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule("explanatory", ("what", "explain", "define"), _explanatory),
    IntentRule("procedural", ("how", "steps", "process"), _procedural),
    IntentRule("comparison", ("difference", "compare", "vs"), _comparison),
    IntentRule("example", ("example", "instance"), _example),
)
GENERIC_NOTE_RULE = IntentRule("generic", (), _generic)

GENERAL_INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule("greeting", ("hello", "hi", "hey"), _fixed(GREETING_REPLY)),
    IntentRule("help", ("help", "what can you do"), _fixed(HELP_REPLY)),
    IntentRule("gratitude", ("thank",), _fixed(THANKS_REPLY)),
)
NOT_FOUND_RULE = IntentRule("not_found", (), _fixed(NOT_FOUND_REPLY))


def classify_intent(
    query: str,
    rules: Sequence[IntentRule],
    default: Optional[IntentRule] = None,
) -> Optional[IntentRule]:
    """Return the first rule matching `query`, or `default`."""
    for rule in rules:
        if rule.matches(query):
            return rule
    return default


def build_context(notes: Sequence[StudyNote]) -> str:
    return "\n\n".join(
        f"Title: {note.title}\nSubject: {note.subject}\nContent: {note.content}" for note in notes
    )


def extract_key_info(context: str, query: str) -> str:
    """Pick the context lines that mention a query token.

    At most ten matching lines are kept in their original order. When no line
    matches, the first fifteen non-empty lines are returned instead.
    """
    lines = [line for line in context.split("\n") if line.strip()]
    tokens = tokenize(query)

    relevant = [line for line in lines if any(token in line.lower() for token in tokens)]
    if relevant:
        return "\n".join(relevant[:MAX_EXCERPT_LINES])
    return "\n".join(lines[:FALLBACK_EXCERPT_LINES])


def generate_general_response(query: str) -> str:
    rule = classify_intent(query, GENERAL_INTENT_RULES, default=NOT_FOUND_RULE)
    logger.debug("General intent for %r: %s", query, rule.name)
    return rule.template(query, (), "")


def generate_response(query: str, notes: Sequence[StudyNote]) -> str:
    rule = classify_intent(query, NOTE_INTENT_RULES, default=GENERIC_NOTE_RULE)
    logger.debug("Note intent for %r: %s", query, rule.name)
    excerpt = extract_key_info(build_context(notes), query)
    return rule.template(query, notes, excerpt)


def synthesize(query: str, matches: Sequence[StudyNote]) -> Reply:
    if not matches:
        return Reply(text=generate_general_response(query))
    return Reply(
        text=generate_response(query, matches),
        related_note_ids=tuple(note.id for note in matches),
    )


__all__ = [
    "GENERAL_INTENT_RULES",
    "GREETING_REPLY",
    "HELP_REPLY",
    "IntentRule",
    "NOTE_INTENT_RULES",
    "NOT_FOUND_REPLY",
    "Reply",
    "THANKS_REPLY",
    "build_context",
    "classify_intent",
    "extract_key_info",
    "generate_general_response",
    "generate_response",
    "synthesize",
]
