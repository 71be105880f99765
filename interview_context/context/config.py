"""
Budget configuration for conversation context building.

The downstream realtime model has a large context window, but most of it
is reserved for:
- System instructions (~3K tokens)
- Problem description (~1K tokens)
- Current code context (~2K tokens)
- Response generation (~2K tokens)
so conversation history targets ~8K tokens.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


MAX_CONVERSATION_TOKENS = 8000
COMPACT_THRESHOLD = 6000  # 75% of MAX_CONVERSATION_TOKENS
RECENT_MESSAGES_TO_KEEP = 8

SUMMARY_MAX_TOKENS = 500
SUMMARY_TEMPERATURE = 0.3
SUMMARY_TIMEOUT_SECONDS = 30.0
FALLBACK_MAX_ENTRIES = 5
FALLBACK_MAX_CHARS = 100


class ContextBudget(BaseModel):
    """
    Token budget and summarization settings.

    Attributes:
        max_conversation_tokens: Hard budget used for percent_used reporting
        compact_threshold: Total at which older turns get summarized
        recent_messages_to_keep: Trailing turns always kept verbatim
        summary_max_tokens: Output cap for the summarization call
        summary_temperature: Sampling temperature for the summarization call
        summary_timeout: Seconds to wait for the summarization call
        fallback_max_entries: Older turns listed by the local fallback digest
        fallback_max_chars: Characters kept per turn in the fallback digest
        summary_model: Model override for summarization (provider default if None)
    """
    model_config = ConfigDict(frozen=True)

    max_conversation_tokens: int = Field(MAX_CONVERSATION_TOKENS, gt=0)
    compact_threshold: int = Field(COMPACT_THRESHOLD, gt=0)
    recent_messages_to_keep: int = Field(RECENT_MESSAGES_TO_KEEP, ge=1)
    summary_max_tokens: int = Field(SUMMARY_MAX_TOKENS, gt=0)
    summary_temperature: float = Field(SUMMARY_TEMPERATURE, ge=0, le=2)
    summary_timeout: float = Field(SUMMARY_TIMEOUT_SECONDS, gt=0)
    fallback_max_entries: int = Field(FALLBACK_MAX_ENTRIES, ge=1)
    fallback_max_chars: int = Field(FALLBACK_MAX_CHARS, ge=1)
    summary_model: Optional[str] = None

    @model_validator(mode="after")
    def _check_threshold(self) -> "ContextBudget":
        if self.compact_threshold > self.max_conversation_tokens:
            raise ValueError(
                f"compact_threshold ({self.compact_threshold}) cannot exceed "
                f"max_conversation_tokens ({self.max_conversation_tokens})"
            )
        return self

    @classmethod
    def from_env(cls) -> "ContextBudget":
        """
        Build a budget from environment variables, falling back to defaults.

        Environment Variables:
            CONTEXT_MAX_TOKENS
            CONTEXT_COMPACT_THRESHOLD
            CONTEXT_RECENT_MESSAGES
            CONTEXT_SUMMARY_TIMEOUT
            CONTEXT_SUMMARY_MODEL
        """
        return cls(
            max_conversation_tokens=int(os.environ.get("CONTEXT_MAX_TOKENS", MAX_CONVERSATION_TOKENS)),
            compact_threshold=int(os.environ.get("CONTEXT_COMPACT_THRESHOLD", COMPACT_THRESHOLD)),
            recent_messages_to_keep=int(os.environ.get("CONTEXT_RECENT_MESSAGES", RECENT_MESSAGES_TO_KEEP)),
            summary_timeout=float(os.environ.get("CONTEXT_SUMMARY_TIMEOUT", SUMMARY_TIMEOUT_SECONDS)),
            summary_model=os.environ.get("CONTEXT_SUMMARY_MODEL") or None,
        )
