"""
Shared fixtures for the interview context test suite.
"""

import asyncio
from typing import Any, List, Optional

import pytest

from interview_context.context import (
    Speaker,
    TranscriptEntry,
    reset_default_summarizer,
)
from interview_context.llm import CompletionResponse, LLMProvider, LLMProviderError, Message


def make_entry(index: int, words: int, speaker: Optional[Speaker] = None, **kwargs: Any) -> TranscriptEntry:
    """Build a turn of exactly ``words`` words, alternating speakers by index."""
    if speaker is None:
        speaker = Speaker.USER if index % 2 == 0 else Speaker.INTERVIEWER
    text = " ".join(f"turn{index}word{i}" for i in range(words))
    return TranscriptEntry(timestamp=1_700_000_000_000 + index * 1000, speaker=speaker, text=text, **kwargs)


def make_transcript(count: int, words: int) -> List[TranscriptEntry]:
    return [make_entry(i, words) for i in range(count)]


class FakeLLMProvider(LLMProvider):
    """Records calls and returns a canned completion."""

    def __init__(self, content: Optional[str] = "- Candidate clarified the requirements", delay: float = 0.0):
        self.content = content
        self.delay = delay
        self.calls: List[dict] = []

    async def completion(self, messages: List[Message], *, temperature=None, max_tokens=None, **kwargs):
        self.calls.append({
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        return CompletionResponse(content=self.content, model="fake-model")

    def get_model_info(self):
        return {"model": "fake-model", "provider": "Fake"}


class FailingLLMProvider(LLMProvider):
    """Fails every call with the configured exception."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error or LLMProviderError("gateway unavailable", status_code=502, provider="Fake")
        self.calls = 0

    async def completion(self, messages, *, temperature=None, max_tokens=None, **kwargs):
        self.calls += 1
        raise self.error


@pytest.fixture(autouse=True)
def _reset_default_summarizer(monkeypatch):
    """Keep the default summarizer offline and isolated per test."""
    monkeypatch.delenv("PORTKEY_API_KEY", raising=False)
    reset_default_summarizer()
    yield
    reset_default_summarizer()


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
def failing_llm():
    return FailingLLMProvider()
