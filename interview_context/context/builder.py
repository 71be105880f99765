"""
Conversation context building.

Keeps an interview transcript inside the conversation token budget:
- Under the compaction threshold, every turn is kept verbatim
- Over it, the last N turns stay verbatim and the rest are summarized
- A transcript with nothing older than the recent window passes through
  whole, even over budget; turns are never dropped or truncated
"""

import asyncio
import logging
import math
from typing import Dict, Optional, Sequence, Tuple

from .base import SummarizationProvider, build_fallback_digest
from .config import ContextBudget
from .tokens import TokenEstimator, calculate_transcript_tokens, estimate_tokens
from .types import CompactionState, ConversationContext, TokenStats, TranscriptEntry
from .v1 import get_default_summarizer


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ConversationContextBuilder:
    """
    Builds ConversationContext values from full transcripts.

    A builder holds configuration only. Every call receives the complete
    transcript and returns a fresh context; nothing is cached between calls.

    Example:
        >>> builder = ConversationContextBuilder(summarizer=my_summarizer)
        >>> context = await builder.build_context(transcript)
        >>> stats = builder.get_token_stats(transcript)
    """

    def __init__(
        self,
        summarizer: Optional[SummarizationProvider] = None,
        budget: Optional[ContextBudget] = None,
        estimator: Optional[TokenEstimator] = None,
        dedupe_in_flight: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the builder.

        Args:
            summarizer: Summarization strategy. Resolved lazily to
                        get_default_summarizer(budget) when None.
            budget: Token budget (defaults to ContextBudget())
            estimator: Token estimator (defaults to the word-count heuristic)
            dedupe_in_flight: Share one build between concurrent calls for
                              the same session and transcript length
            logger: Optional logger
        """
        self.budget = budget or ContextBudget()
        self.estimator = estimator or estimate_tokens
        self.dedupe_in_flight = dedupe_in_flight
        self.logger = logger or logging.getLogger(__name__)
        self._summarizer = summarizer
        self._in_flight: Dict[Tuple[str, int], "asyncio.Task[ConversationContext]"] = {}

    @property
    def summarizer(self) -> SummarizationProvider:
        if self._summarizer is None:
            self._summarizer = get_default_summarizer(self.budget)
        return self._summarizer

    def count_tokens(self, transcript: Sequence[TranscriptEntry]) -> int:
        return calculate_transcript_tokens(transcript, self.estimator)

    def needs_compaction(self, transcript: Sequence[TranscriptEntry]) -> bool:
        """Check if the transcript has reached the compaction threshold."""
        return self.count_tokens(transcript) >= self.budget.compact_threshold

    def get_token_stats(self, transcript: Sequence[TranscriptEntry]) -> TokenStats:
        """Token stats for monitoring, warnings and forced wrap-up."""
        total_tokens = self.count_tokens(transcript)
        return TokenStats(
            total_tokens=total_tokens,
            message_count=len(transcript),
            needs_compaction=total_tokens >= self.budget.compact_threshold,
            percent_used=_round_half_up(total_tokens / self.budget.max_conversation_tokens * 100),
        )

    async def build_context(
        self,
        transcript: Sequence[TranscriptEntry],
        session_id: Optional[str] = None,
    ) -> ConversationContext:
        """
        Build a conversation context, summarizing older turns if needed.

        Never raises because of a summarization failure.

        Args:
            transcript: Full transcript, chronological
            session_id: Interview session, used only for in-flight deduplication

        Returns:
            ConversationContext with summary + recent messages
        """
        if not (self.dedupe_in_flight and session_id):
            return await self._build(transcript)

        key = (session_id, len(transcript))
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._build(transcript))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        else:
            self.logger.debug(f"Joining in-flight context build for session {session_id}")
        # A cancelled caller must not cancel the shared build
        return await asyncio.shield(task)

    async def _build(self, transcript: Sequence[TranscriptEntry]) -> ConversationContext:
        if not transcript:
            return ConversationContext()

        entries = [entry.with_token_estimate(self.estimator) for entry in transcript]
        total_tokens = self.count_tokens(entries)

        if total_tokens < self.budget.compact_threshold:
            return ConversationContext(
                recent_messages=entries,
                recent_tokens=total_tokens,
                total_tokens=total_tokens,
            )

        keep = self.budget.recent_messages_to_keep
        recent_messages = entries[-keep:]
        older_messages = entries[:-keep]
        recent_tokens = self.count_tokens(recent_messages)

        if not older_messages:
            self.logger.warning(
                f"Transcript is {total_tokens} tokens (threshold {self.budget.compact_threshold}) "
                f"but has only {len(entries)} messages; keeping all verbatim"
            )
            return ConversationContext(
                recent_messages=recent_messages,
                recent_tokens=recent_tokens,
                total_tokens=recent_tokens,
                state=CompactionState.OVERFLOW_NO_COMPACTION,
            )

        self.logger.info(
            f"Compacting transcript: {total_tokens} tokens, summarizing {len(older_messages)} "
            f"messages, keeping {len(recent_messages)}"
        )
        summary = await self._summarize(older_messages)
        summary_tokens = self.estimator(summary)

        self.logger.info(
            f"Compaction complete: {total_tokens} -> {summary_tokens + recent_tokens} tokens"
        )
        return ConversationContext(
            summary=summary,
            summary_tokens=summary_tokens,
            recent_messages=recent_messages,
            recent_tokens=recent_tokens,
            total_tokens=summary_tokens + recent_tokens,
            state=CompactionState.COMPACTED,
        )

    async def _summarize(self, older_messages: Sequence[TranscriptEntry]) -> str:
        try:
            summary = await self.summarizer.summarize(older_messages)
        except Exception as e:
            self.logger.error(f"Summarizer failed, using local digest: {e}")
            summary = ""
        if not summary or not summary.strip():
            summary = build_fallback_digest(
                older_messages,
                max_entries=self.budget.fallback_max_entries,
                max_chars=self.budget.fallback_max_chars,
            )
        return summary


async def build_conversation_context(
    transcript: Sequence[TranscriptEntry],
    summarizer: Optional[SummarizationProvider] = None,
    budget: Optional[ContextBudget] = None,
) -> ConversationContext:
    """
    Build conversation context with compaction if needed.

    Returns a context object with summary + recent messages.
    """
    builder = ConversationContextBuilder(summarizer=summarizer, budget=budget)
    return await builder.build_context(transcript)


def needs_compaction(
    transcript: Sequence[TranscriptEntry],
    budget: Optional[ContextBudget] = None,
) -> bool:
    """Check if compaction is needed based on token count."""
    return ConversationContextBuilder(budget=budget).needs_compaction(transcript)


def get_token_stats(
    transcript: Sequence[TranscriptEntry],
    budget: Optional[ContextBudget] = None,
) -> TokenStats:
    """Get token stats for debugging/monitoring."""
    return ConversationContextBuilder(budget=budget).get_token_stats(transcript)
