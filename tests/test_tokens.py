"""
Tests for token estimation and transcript accounting.
"""

import math

import pytest

from interview_context.context import (
    Speaker,
    TranscriptEntry,
    WordCountTokenEstimator,
    calculate_transcript_tokens,
    estimate_tokens,
)
from tests.conftest import make_entry, make_transcript


class TestEstimateTokens:
    """Test the word-count heuristic."""

    def test_empty_string(self):
        assert estimate_tokens("") == 0

    def test_none(self):
        assert estimate_tokens(None) == 0

    def test_whitespace_only(self):
        assert estimate_tokens("   \n\t  ") == 0

    def test_three_words(self):
        assert estimate_tokens("one two three") == math.ceil(3 * 1.3) == 4

    def test_mixed_whitespace_ignored(self):
        assert estimate_tokens("  one\ttwo \n\n three  ") == 4

    def test_unicode_separators(self):
        assert estimate_tokens("one\u00a0two\u3000three") == 4
        assert estimate_tokens("one\ufefftwo") == 3
        assert estimate_tokens("\ufeff") == 0

    def test_control_separators_join_words(self):
        assert estimate_tokens("one\x1ftwo") == 2
        assert estimate_tokens("one\x85two") == 2

    def test_single_word_rounds_up(self):
        assert estimate_tokens("hello") == 2

    def test_monotonic_in_word_count(self):
        previous = 0
        for n in range(0, 200):
            current = estimate_tokens(" ".join(["word"] * n))
            assert current >= previous
            previous = current


class TestWordCountTokenEstimator:
    """Test the pluggable estimator."""

    def test_custom_ratio(self):
        estimator = WordCountTokenEstimator(tokens_per_word=2.0)
        assert estimator("a b c") == 6

    def test_default_matches_module_function(self):
        estimator = WordCountTokenEstimator()
        text = "the candidate proposed a consistent hashing ring"
        assert estimator(text) == estimate_tokens(text)

    def test_rejects_non_positive_ratio(self):
        with pytest.raises(ValueError):
            WordCountTokenEstimator(tokens_per_word=0)


class TestCalculateTranscriptTokens:
    """Test transcript accounting."""

    def test_empty_transcript(self):
        assert calculate_transcript_tokens([]) == 0

    def test_sums_estimates(self):
        transcript = make_transcript(4, 10)
        assert calculate_transcript_tokens(transcript) == 4 * estimate_tokens(transcript[0].text)

    def test_prefers_precomputed_estimate(self):
        entry = TranscriptEntry(timestamp=1, speaker=Speaker.USER, text="short", estimated_tokens=100)
        assert calculate_transcript_tokens([entry]) == 100

    def test_precomputed_zero_is_respected(self):
        entry = TranscriptEntry(timestamp=1, speaker=Speaker.USER, text="not empty at all", estimated_tokens=0)
        assert calculate_transcript_tokens([entry]) == 0

    def test_custom_estimator(self):
        transcript = [make_entry(0, 10), make_entry(1, 3)]
        assert calculate_transcript_tokens(transcript, estimator=lambda text: 7) == 14

    def test_does_not_mutate_entries(self):
        transcript = make_transcript(3, 5)
        calculate_transcript_tokens(transcript)
        assert all(entry.estimated_tokens is None for entry in transcript)
