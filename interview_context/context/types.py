"""
Context Types
=============

Pydantic models for interview transcripts and the conversation context
built from them. All models are frozen: the engine never mutates a
caller's transcript, it derives copies.
"""

from typing import Callable, List, Optional
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Speaker(str, Enum):
    """Who produced a transcript turn."""
    USER = "user"
    INTERVIEWER = "interviewer"

    @property
    def label(self) -> str:
        """Display name used when a turn is rendered for a prompt."""
        return "Candidate" if self is Speaker.USER else "Interviewer"


class CompactionState(str, Enum):
    """
    How a ConversationContext was produced.

    - uncompacted: total was under the threshold, every turn kept verbatim
    - overflow_no_compaction: over the threshold but nothing older than the
      recent window, so every turn kept verbatim and the budget is exceeded
    - compacted: older turns replaced by a summary
    """
    UNCOMPACTED = "uncompacted"
    OVERFLOW_NO_COMPACTION = "overflow_no_compaction"
    COMPACTED = "compacted"


class TranscriptEntry(BaseModel):
    """
    One utterance of an interview.

    Attributes:
        timestamp: When the turn completed (epoch milliseconds)
        speaker: user (the candidate) or interviewer
        text: What was said
        estimated_tokens: Optional precomputed token cost. Also accepted
                          as ``estimatedTokens`` from upstream JSON.
    """
    model_config = ConfigDict(frozen=True)

    timestamp: float = Field(..., description="Epoch milliseconds of the turn")
    speaker: Speaker = Field(..., description="Who spoke")
    text: str = Field(..., description="Utterance content")
    estimated_tokens: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("estimated_tokens", "estimatedTokens"),
        description="Precomputed token estimate",
    )

    @property
    def label(self) -> str:
        return self.speaker.label

    def with_token_estimate(self, estimator: Callable[[str], int]) -> "TranscriptEntry":
        """Return this entry with a token estimate attached, copying if one is missing."""
        if self.estimated_tokens is not None:
            return self
        return self.model_copy(update={"estimated_tokens": estimator(self.text)})


class ConversationContext(BaseModel):
    """
    Bounded view of a transcript, ready for a downstream prompt.

    recent_messages is always a chronological suffix of the source
    transcript; anything before it is represented only by summary.
    """
    model_config = ConfigDict(frozen=True)

    summary: Optional[str] = Field(None, description="Digest of older turns")
    summary_tokens: Optional[int] = Field(None, ge=0)
    recent_messages: List[TranscriptEntry] = Field(default_factory=list)
    recent_tokens: int = Field(0, ge=0)
    total_tokens: int = Field(0, ge=0)
    state: CompactionState = CompactionState.UNCOMPACTED

    @model_validator(mode="after")
    def _check_summary_tokens(self) -> "ConversationContext":
        if (self.summary is None) != (self.summary_tokens is None):
            raise ValueError("summary_tokens must be set if and only if summary is set")
        if self.total_tokens != (self.summary_tokens or 0) + self.recent_tokens:
            raise ValueError("total_tokens must equal summary_tokens + recent_tokens")
        return self

    @property
    def is_compacted(self) -> bool:
        return self.state == CompactionState.COMPACTED


class TokenStats(BaseModel):
    """Budget usage of a transcript, for monitoring and backpressure."""
    total_tokens: int
    message_count: int
    needs_compaction: bool
    percent_used: int
