"""
Study Notes Assistant.

Keyword-overlap retrieval over study notes with templated replies.
"""

from .assistant import ChatRequest, ChatResponse, answer, respond
from .notes import StudyNote
from .ranker import rank
from .synthesizer import Reply, synthesize

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "Reply",
    "StudyNote",
    "answer",
    "rank",
    "respond",
    "synthesize",
]
