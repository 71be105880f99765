"""
Token estimation for transcripts.

No tokenizer is available at this layer, so cost is approximated from
word count. Anything with the ``TokenEstimator`` shape (``str -> int``)
can be swapped in for a precise count.
"""

import math
import re
from typing import Callable, Optional, Sequence

from .types import TranscriptEntry


TokenEstimator = Callable[[str], int]

# Subword and punctuation inflation for conversational English
TOKENS_PER_WORD = 1.3

# Word separators: Unicode space separators, \t\n\v\f\r, U+2028, U+2029 and the BOM.
# Unlike str.split(), \x1c-\x1f and \x85 do not separate words.
_WHITESPACE = re.compile(r"[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+")


class WordCountTokenEstimator:
    """Estimate tokens as ceil(words * tokens_per_word)."""

    def __init__(self, tokens_per_word: float = TOKENS_PER_WORD):
        if tokens_per_word <= 0:
            raise ValueError("tokens_per_word must be positive")
        self.tokens_per_word = tokens_per_word

    def __call__(self, text: Optional[str]) -> int:
        if not text:
            return 0
        words = [word for word in _WHITESPACE.split(text) if word]
        return math.ceil(len(words) * self.tokens_per_word)


_default_estimator = WordCountTokenEstimator()


def estimate_tokens(text: Optional[str]) -> int:
    """
    Approximate the token count of a string.

    Empty or whitespace-only input yields 0.

    Example:
        >>> estimate_tokens("one two three")
        4
    """
    return _default_estimator(text)


def calculate_transcript_tokens(
    transcript: Sequence[TranscriptEntry],
    estimator: Optional[TokenEstimator] = None,
) -> int:
    """
    Sum the token cost of a transcript.

    Entries carrying ``estimated_tokens`` use it as-is; the rest are
    estimated from their text.
    """
    estimator = estimator or estimate_tokens
    return sum(
        entry.estimated_tokens if entry.estimated_tokens is not None else estimator(entry.text)
        for entry in transcript
    )
