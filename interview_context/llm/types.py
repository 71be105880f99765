"""
Message and response types for the summarization call.
"""

from typing import Optional, Any, Dict
from pydantic import BaseModel, Field


class Message(BaseModel):
    """
    A role-tagged chat message in the OpenAI format.

    Example:
        >>> Message(role="user", content="Summarize: ...").to_dict()
        {"role": "user", "content": "Summarize: ..."}
    """
    role: str = Field(..., description="system, user or assistant")
    content: Optional[str] = None
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Request payload form; None fields are left out."""
        d = {"role": self.role}
        if self.content is not None:
            d["content"] = self.content
        if self.name is not None:
            d["name"] = self.name
        return d


class CompletionResponse(BaseModel):
    """Text and metadata of one non-streaming completion."""
    content: Optional[str] = None
    role: str = "assistant"
    finish_reason: Optional[str] = None
    model: Optional[str] = None
    id: Optional[str] = None
    usage: Optional[Dict[str, int]] = Field(None, description="prompt/completion/total token counts")


class LLMProviderError(Exception):
    """
    Raised for transport, gateway and empty-response failures.

    The summarizer recovers from this one type by falling back to the
    local digest.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.provider = provider
        self.original_error = original_error

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.insert(0, f"[{self.provider}]")
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        return " ".join(parts)
