"""
Model-name routing helpers for the Portkey provider.
"""

from typing import List, Dict, Any


def get_provider_from_model(model: str) -> str:
    """
    Map a model name to the Portkey provider that serves it.

    Gateway prefixes are tolerated: "anthropic/claude-sonnet-4" -> "anthropic".
    Unrecognized names give "unknown", which routes with the OpenAI key.
    """
    name = model.lower()
    if "gpt" in name or "o1" in name:
        return "openai"
    if any(family in name for family in ("claude", "sonnet", "opus", "haiku")):
        return "anthropic"
    if "gemini" in name:
        return "google"
    return "unknown"


def normalize_messages_for_provider(messages: List[Dict[str, Any]], provider: str) -> List[Dict[str, Any]]:
    """Wrap string content as text parts for Gemini; other providers get the list as-is."""
    if provider != "google":
        return messages
    return [
        {**msg, "content": [{"type": "text", "text": msg["content"]}]}
        if isinstance(msg.get("content"), str) else msg
        for msg in messages
    ]
