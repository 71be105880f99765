"""
Conversation Context Module

Keeps long interview transcripts inside the conversation token budget by
summarizing older turns while preserving the most recent ones verbatim.
"""

from .types import (
    Speaker,
    CompactionState,
    TranscriptEntry,
    ConversationContext,
    TokenStats,
)
from .tokens import (
    TokenEstimator,
    WordCountTokenEstimator,
    estimate_tokens,
    calculate_transcript_tokens,
)
from .config import (
    ContextBudget,
    MAX_CONVERSATION_TOKENS,
    COMPACT_THRESHOLD,
    RECENT_MESSAGES_TO_KEEP,
)
from .base import SummarizationProvider, build_fallback_digest, format_transcript
from .v1 import (
    LLMSummarizationProvider,
    FallbackSummarizationProvider,
    get_default_summarizer,
    reset_default_summarizer,
)
from .builder import (
    ConversationContextBuilder,
    build_conversation_context,
    needs_compaction,
    get_token_stats,
)
from .formatting import format_context_for_instructions, append_context_to_instructions

__all__ = [
    "Speaker",
    "CompactionState",
    "TranscriptEntry",
    "ConversationContext",
    "TokenStats",
    "TokenEstimator",
    "WordCountTokenEstimator",
    "estimate_tokens",
    "calculate_transcript_tokens",
    "ContextBudget",
    "MAX_CONVERSATION_TOKENS",
    "COMPACT_THRESHOLD",
    "RECENT_MESSAGES_TO_KEEP",
    "SummarizationProvider",
    "LLMSummarizationProvider",
    "FallbackSummarizationProvider",
    "build_fallback_digest",
    "format_transcript",
    "get_default_summarizer",
    "reset_default_summarizer",
    "ConversationContextBuilder",
    "build_conversation_context",
    "needs_compaction",
    "get_token_stats",
    "format_context_for_instructions",
    "append_context_to_instructions",
]
