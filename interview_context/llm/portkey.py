"""
Portkey LLM Provider
====================

Implementation of LLMProvider using Portkey AI Gateway.

Portkey provides a unified API to access multiple LLM providers (OpenAI, Anthropic,
Google, etc.) with automatic retries, caching and cost tracking. The context
engine only needs short, low-temperature summaries, so this provider exposes
non-streaming completions.

Configuration:
-------------
You need a Portkey API key and a "virtual key" that maps to your actual
LLM provider credentials. Set up virtual keys in the Portkey dashboard.

Environment Variables:
    PORTKEY_API_KEY: Your Portkey API key
    PORTKEY_VIRTUAL_KEY: Virtual key for the LLM provider
    PORTKEY_CONFIG: Optional Portkey config ID (alternative to virtual keys)

Example:
-------
```python
provider = PortkeyLLMProvider(
    api_key="pk-xxx",
    virtual_key="openai-xxx",
    model="gpt-4o-mini"
)

messages = [Message(role="user", content="Summarize ...")]
response = await provider.completion(messages, temperature=0.3, max_tokens=500)
```
"""

import os
import logging
from typing import Optional, List, Any, Dict
from openai import AsyncOpenAI
from portkey_ai import createHeaders, PORTKEY_GATEWAY_URL

from .base import (
    LLMProvider,
    Message,
    CompletionResponse,
    LLMProviderError,
)
from .utils import (
    get_provider_from_model,
    normalize_messages_for_provider,
)


class PortkeyLLMProvider(LLMProvider):
    """
    LLM Provider implementation using Portkey AI Gateway.

    Portkey acts as a proxy/gateway that routes requests to various LLM providers.
    The provider (and therefore the virtual key) is inferred from the model name
    on every request.

    Attributes:
        model: The model to use for completions
        default_temperature: Default temperature for completions
        default_max_tokens: Default max tokens for completions
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        virtual_key: Optional[str] = None,
        virtual_keys: Optional[Dict[str, Optional[str]]] = None,
        config: Optional[str] = None,
        model: str = "gpt-4o-mini",
        default_temperature: float = 0.7,
        default_max_tokens: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the Portkey LLM Provider.

        Args:
            api_key: Portkey API key. Falls back to PORTKEY_API_KEY env var.
            virtual_key: Single Portkey virtual key, used for every provider.
            virtual_keys: Dict of provider-specific virtual keys:
                         {"openai": "vk-xxx", "anthropic": "vk-yyy", "google": "vk-zzz"}
            config: Portkey config ID for multi-provider routing (alternative to virtual_keys).
            model: Model identifier (e.g., "gpt-4o-mini", "claude-sonnet-4").
            default_temperature: Default sampling temperature (0.0-2.0).
            default_max_tokens: Default max tokens. None = provider default.
            logger: Optional logger

        Raises:
            ValueError: If api_key is not provided and not found in environment.
            ValueError: If no virtual keys or config are available.
        """
        self.logger = logger or logging.getLogger(__name__)

        self.api_key = api_key or os.environ.get("PORTKEY_API_KEY")
        self.config = config or os.environ.get("PORTKEY_CONFIG")

        self._virtual_keys: Dict[str, Optional[str]] = dict(virtual_keys or {})

        # A single virtual key serves every provider
        if virtual_key:
            self._virtual_keys["openai"] = virtual_key
        elif os.environ.get("PORTKEY_VIRTUAL_KEY"):
            self._virtual_keys["openai"] = os.environ.get("PORTKEY_VIRTUAL_KEY")

        if not self.api_key:
            raise ValueError(
                "Portkey API key required. Pass api_key or set PORTKEY_API_KEY env var."
            )

        has_any_virtual_key = any(v for v in self._virtual_keys.values() if v)
        if not has_any_virtual_key and not self.config:
            raise ValueError(
                "At least one virtual_key or config is required. "
                "Set virtual_keys={'openai': 'vk-xxx', 'anthropic': 'vk-yyy'} or PORTKEY_CONFIG."
            )

        self.model = model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

        self.logger.debug(
            f"PortkeyLLMProvider init: model={model}, config={self.config}, "
            f"virtual_keys={sorted(k for k, v in self._virtual_keys.items() if v)}"
        )

    def _get_virtual_key_for_provider(self, provider: str) -> Optional[str]:
        """Get the virtual key for a specific provider."""
        if self._virtual_keys.get(provider):
            return self._virtual_keys[provider]

        if provider == "google" and self._virtual_keys.get("gemini"):
            return self._virtual_keys["gemini"]

        # Single virtual_key mode
        if self._virtual_keys.get("openai"):
            if provider != "openai":
                self.logger.warning(f"No {provider} virtual key found, falling back to OpenAI key")
            return self._virtual_keys["openai"]

        return None

    def _create_client_for_provider(self, provider: str) -> AsyncOpenAI:
        """
        Create an AsyncOpenAI client configured for a specific provider.

        Raises:
            ValueError: If neither a config nor a virtual key can route the request
        """
        portkey_provider = provider if provider in ("openai", "anthropic", "google") else "openai"

        header_kwargs: Dict[str, Any] = {
            "provider": portkey_provider,
            "api_key": self.api_key,
        }
        if self.config:
            header_kwargs["config"] = self.config
        else:
            virtual_key = self._get_virtual_key_for_provider(provider)
            if not virtual_key:
                raise ValueError(f"No virtual key available for provider: {portkey_provider}")
            header_kwargs["virtual_key"] = virtual_key

        return AsyncOpenAI(
            base_url=PORTKEY_GATEWAY_URL,
            api_key="xxx",  # Auth is via Portkey headers
            default_headers=createHeaders(**header_kwargs)
        )

    def _build_params(
        self,
        message_dicts: List[Dict[str, Any]],
        model: str,
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        provider = get_provider_from_model(model)
        params: Dict[str, Any] = {
            "model": model,
            "messages": normalize_messages_for_provider(message_dicts, provider),
            "stream": False,
            "temperature": temperature if temperature is not None else self.default_temperature,
        }

        limit = max_tokens if max_tokens is not None else self.default_max_tokens
        # GPT-5 uses max_completion_tokens instead of max_tokens
        if model.startswith("gpt-5"):
            if limit is not None:
                params["max_completion_tokens"] = limit
        elif limit is not None:
            params["max_tokens"] = limit
        elif provider == "anthropic":
            # Anthropic REQUIRES max_tokens
            params["max_tokens"] = 8192

        return params

    async def completion(
        self,
        messages: List[Message],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any
    ) -> CompletionResponse:
        """
        Generate a non-streaming completion using Portkey.

        Args:
            messages: Conversation messages
            temperature: Sampling temperature
            max_tokens: Max tokens to generate
            **kwargs: Additional API parameters ("model" overrides self.model)

        Returns:
            CompletionResponse with content, finish_reason, model, id and usage

        Raises:
            LLMProviderError: On API errors
        """
        validated = self.validate_messages(messages)
        message_dicts = [m.to_dict() for m in validated]

        model_to_use = kwargs.pop("model", None) or self.model
        params = self._build_params(message_dicts, model_to_use, temperature, max_tokens)
        params.update(kwargs)

        try:
            client = self._create_client_for_provider(get_provider_from_model(model_to_use))
            response = await client.chat.completions.create(**params)
        except Exception as e:
            raise LLMProviderError(
                message=str(e),
                provider="Portkey",
                original_error=e
            ) from e

        content = None
        finish_reason = None
        if response.choices:
            choice = response.choices[0]
            if choice.message:
                content = choice.message.content
            finish_reason = choice.finish_reason

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return CompletionResponse(
            content=content,
            role="assistant",
            finish_reason=finish_reason,
            model=response.model or model_to_use,
            id=response.id,
            usage=usage,
        )

    def get_model_info(self) -> Dict[str, Any]:
        """
        Return information about the current Portkey configuration.
        """
        info = {
            "model": self.model,
            "provider": "Portkey",
            "default_temperature": self.default_temperature,
        }
        if self.default_max_tokens:
            info["default_max_tokens"] = self.default_max_tokens
        return info
