"""
Base classes and utilities for transcript summarization.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import logging

from .config import FALLBACK_MAX_CHARS, FALLBACK_MAX_ENTRIES
from .types import TranscriptEntry


def format_transcript(messages: Sequence[TranscriptEntry]) -> str:
    """Render turns as ``<Role>: <text>`` lines."""
    return "\n".join(f"{m.label}: {m.text}" for m in messages)


def build_summary_prompt(messages: Sequence[TranscriptEntry]) -> str:
    """
    Build the user prompt asking for a bullet-point digest of an
    interview excerpt.
    """
    return f"""Summarize this interview conversation excerpt into a concise bullet-point format.
Focus on:
- Requirements/constraints clarified
- Key design decisions discussed
- Technical trade-offs mentioned
- Any issues or concerns raised

Keep it brief - each bullet should be one line.
Do NOT include greetings or filler conversation.

Conversation:
{format_transcript(messages)}

Summary (bullet points only):"""


def build_fallback_digest(
    messages: Sequence[TranscriptEntry],
    max_entries: int = FALLBACK_MAX_ENTRIES,
    max_chars: int = FALLBACK_MAX_CHARS,
) -> str:
    """
    Deterministic digest used when the summarization call fails.

    Lists the last ``max_entries`` turns, each cut to ``max_chars``
    characters, as ``- <Role>: <text>...`` lines. Pure string work, so
    it cannot fail, and it is non-empty for non-empty input.

    Args:
        messages: Older turns, chronological
        max_entries: How many trailing turns to list
        max_chars: Characters kept from each turn

    Returns:
        Newline-joined digest
    """
    tail: List[TranscriptEntry] = list(messages)[-max_entries:]
    return "\n".join(f"- {m.label}: {m.text[:max_chars]}..." for m in tail)


class SummarizationProvider(ABC):
    """
    Abstract base class for transcript summarization strategies.

    A provider compresses the turns that fall outside the recent window
    into a short digest. Implementations must not raise on provider
    failures: the context builder relies on summarize() always yielding
    usable text for a non-empty input.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the summarization provider.

        Args:
            logger: Optional logger for debugging
        """
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    async def summarize(self, messages: Sequence[TranscriptEntry]) -> str:
        """
        Summarize older interview turns.

        Args:
            messages: Turns to compress, chronological

        Returns:
            Digest text ("" only when messages is empty)
        """
        pass
