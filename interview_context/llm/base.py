"""
LLM Provider Base Class
=======================

This module defines the abstract base class for the text-generation
collaborator used by the context engine. Any backend (Portkey, OpenRouter,
a test double, ...) should inherit from LLMProvider and implement completion().

The design follows these principles:
1. Provider-agnostic message format (OpenAI-compatible)
2. Non-streaming: summaries are consumed whole, never token by token
3. A single error type (LLMProviderError) for every failure mode

Usage Example:
-------------
```python
from interview_context.llm import PortkeyLLMProvider, Message

provider = PortkeyLLMProvider(
    api_key="your-portkey-api-key",
    virtual_key="your-virtual-key",
    model="gpt-4o-mini"
)

messages = [
    Message(role="system", content="You are a technical summarizer."),
    Message(role="user", content="Summarize: ...")
]

text = await provider.generate_text(messages, temperature=0.3, max_tokens=500)
```
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Any, Dict

from interview_context.llm.types import (
    Message,
    CompletionResponse,
    LLMProviderError,
)


__all__ = [
    "Message",
    "CompletionResponse",
    "LLMProvider",
    "LLMProviderError",
]


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Subclasses MUST implement:
        - completion(): Non-streaming response generation

    Subclasses MAY override:
        - validate_messages(): Custom message validation
        - get_model_info(): Return model capabilities

    Error handling:
    --------------
    Providers should raise LLMProviderError for API errors. generate_text()
    additionally raises LLMProviderError when the response carries no text,
    so a malformed response looks the same to callers as a transport error.
    """

    @abstractmethod
    async def completion(
        self,
        messages: List[Message],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> CompletionResponse:
        """
        Generate a non-streaming completion for the given messages.

        Args:
            messages: List of conversation messages. Must contain at least
                     one message. Messages are processed in order.
            temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
                        If None, uses provider's default.
            max_tokens: Maximum tokens to generate. If None, uses provider's default.
            **kwargs: Provider-specific parameters (model, top_p, user, ...)

        Returns:
            CompletionResponse: The complete response with content and metadata.

        Raises:
            LLMProviderError: If the API call fails
            ValueError: If messages are invalid
        """
        ...  # pragma: no cover

    async def generate_text(
        self,
        messages: List[Message],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> str:
        """
        Run a completion and return only its text.

        Raises:
            LLMProviderError: If the call fails or the response has no content
        """
        response = await self.completion(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )
        if not response.content:
            raise LLMProviderError(
                message="No content in LLM response",
                provider=self.get_model_info().get("provider")
            )
        return response.content

    def validate_messages(self, messages: List[Message]) -> List[Message]:
        """
        Validate and potentially transform messages before sending.

        The default implementation just checks that messages is not empty.

        Raises:
            ValueError: If messages are invalid
        """
        if not messages:
            raise ValueError("Messages list cannot be empty")
        return messages

    def get_model_info(self) -> Dict[str, Any]:
        """
        Return information about the current model configuration.

        Returns:
            Dict with model information. Common keys:
                - model: Model identifier
                - provider: Provider name
        """
        return {}
