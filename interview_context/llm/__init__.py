from .types import Message, CompletionResponse, LLMProviderError
from .base import LLMProvider
from .portkey import PortkeyLLMProvider

__all__ = [
    # Types
    "Message",
    "CompletionResponse",
    "LLMProviderError",
    # Providers
    "LLMProvider",
    "PortkeyLLMProvider",
]
