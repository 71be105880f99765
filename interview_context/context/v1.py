"""
V1 Summarization: LLM digest with a deterministic local fallback.

Older interview turns are sent to the text-generation collaborator for a
bullet-point digest. Any failure of that call (timeout, provider error,
empty response) falls back to a digest built locally from the last few
turns, so context building never fails because of summarization.
"""

import asyncio
import logging
import os
from typing import Dict, Optional, Sequence

from interview_context.llm import LLMProvider, Message, PortkeyLLMProvider

from .base import (
    SummarizationProvider,
    build_fallback_digest,
    build_summary_prompt,
)
from .config import (
    FALLBACK_MAX_CHARS,
    FALLBACK_MAX_ENTRIES,
    SUMMARY_MAX_TOKENS,
    SUMMARY_TEMPERATURE,
    SUMMARY_TIMEOUT_SECONDS,
    ContextBudget,
)
from .types import TranscriptEntry


SUMMARIZER_SYSTEM_PROMPT = "You are a technical summarizer. Create concise bullet-point summaries."


class LLMSummarizationProvider(SummarizationProvider):
    """
    Summarization using an LLM provider.

    Strategy:
    1. Render older turns as "Candidate: ..." / "Interviewer: ..." lines
    2. Ask for one-line bullets on requirements, decisions, trade-offs, concerns
    3. One low-temperature call, bounded by a timeout
    4. On any failure, return the local fallback digest
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        model: Optional[str] = None,
        max_tokens: int = SUMMARY_MAX_TOKENS,
        temperature: float = SUMMARY_TEMPERATURE,
        timeout: float = SUMMARY_TIMEOUT_SECONDS,
        fallback_max_entries: int = FALLBACK_MAX_ENTRIES,
        fallback_max_chars: int = FALLBACK_MAX_CHARS,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the LLM summarization provider.

        Args:
            llm_provider: Text-generation collaborator
            model: Model override passed to the provider (provider default if None)
            max_tokens: Output cap for the summary
            temperature: Sampling temperature (low for consistent summaries)
            timeout: Seconds to wait before giving up on the call
            fallback_max_entries: Turns listed by the fallback digest
            fallback_max_chars: Characters kept per turn in the fallback digest
            logger: Optional logger
        """
        super().__init__(logger)
        self.llm_provider = llm_provider
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.fallback_max_entries = fallback_max_entries
        self.fallback_max_chars = fallback_max_chars

    @classmethod
    def from_budget(
        cls,
        llm_provider: LLMProvider,
        budget: ContextBudget,
        logger: Optional[logging.Logger] = None,
    ) -> "LLMSummarizationProvider":
        return cls(
            llm_provider,
            model=budget.summary_model,
            max_tokens=budget.summary_max_tokens,
            temperature=budget.summary_temperature,
            timeout=budget.summary_timeout,
            fallback_max_entries=budget.fallback_max_entries,
            fallback_max_chars=budget.fallback_max_chars,
            logger=logger,
        )

    async def summarize(self, messages: Sequence[TranscriptEntry]) -> str:
        """
        Summarize older turns, falling back to a local digest on failure.

        Args:
            messages: Turns outside the recent window, chronological

        Returns:
            Digest text; "" only for an empty input
        """
        if not messages:
            return ""

        llm_messages = [
            Message(role="system", content=SUMMARIZER_SYSTEM_PROMPT),
            Message(role="user", content=build_summary_prompt(messages)),
        ]
        call_kwargs = {}
        if self.model:
            call_kwargs["model"] = self.model

        self.logger.info(f"Summarizing {len(messages)} older messages")

        try:
            summary = await asyncio.wait_for(
                self.llm_provider.generate_text(
                    llm_messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    **call_kwargs
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self.logger.error(f"Summarization timed out after {self.timeout}s")
        except Exception as e:
            self.logger.error(f"Failed to summarize conversation: {e}")
        else:
            summary = summary.strip()
            if summary:
                return summary
            self.logger.error("Summarization returned only whitespace")

        self.logger.info("Falling back to local digest")
        return build_fallback_digest(
            messages,
            max_entries=self.fallback_max_entries,
            max_chars=self.fallback_max_chars,
        )


class FallbackSummarizationProvider(SummarizationProvider):
    """
    Local digest only, no outbound calls.

    Used when no text-generation collaborator is configured.
    """

    def __init__(
        self,
        max_entries: int = FALLBACK_MAX_ENTRIES,
        max_chars: int = FALLBACK_MAX_CHARS,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger)
        self.max_entries = max_entries
        self.max_chars = max_chars

    async def summarize(self, messages: Sequence[TranscriptEntry]) -> str:
        return build_fallback_digest(messages, max_entries=self.max_entries, max_chars=self.max_chars)


_default_summarizers: Dict[ContextBudget, SummarizationProvider] = {}


def get_default_summarizer(
    budget: Optional[ContextBudget] = None,
    logger: Optional[logging.Logger] = None,
) -> SummarizationProvider:
    """
    Get or create the process-wide summarizer for a budget.

    One instance is cached per budget value, so a caller with a custom
    budget never changes what default-budget callers get.

    Uses Portkey when PORTKEY_API_KEY is set, otherwise the local
    fallback digest.
    """
    budget = budget or ContextBudget.from_env()
    summarizer = _default_summarizers.get(budget)
    if summarizer is None:
        logger = logger or logging.getLogger(__name__)
        if os.environ.get("PORTKEY_API_KEY"):
            provider = PortkeyLLMProvider(
                default_temperature=budget.summary_temperature,
                default_max_tokens=budget.summary_max_tokens,
            )
            summarizer = LLMSummarizationProvider.from_budget(provider, budget, logger=logger)
        else:
            logger.warning("PORTKEY_API_KEY not set, summaries will use the local fallback digest")
            summarizer = FallbackSummarizationProvider(
                max_entries=budget.fallback_max_entries,
                max_chars=budget.fallback_max_chars,
                logger=logger,
            )
        _default_summarizers[budget] = summarizer
    return summarizer


def reset_default_summarizer() -> None:
    """Drop the cached instances (for testing)."""
    _default_summarizers.clear()
