"""
Tests for the LLM summarizer, the fallback digest and the default summarizer factory.
"""

import pytest

from interview_context.context import (
    ContextBudget,
    FallbackSummarizationProvider,
    LLMSummarizationProvider,
    Speaker,
    build_fallback_digest,
    format_transcript,
    get_default_summarizer,
)
from interview_context.context.v1 import SUMMARIZER_SYSTEM_PROMPT
from interview_context.llm import LLMProviderError
from tests.conftest import FailingLLMProvider, FakeLLMProvider, make_entry, make_transcript


class TestFormatTranscript:
    """Test role-labelled transcript rendering."""

    def test_labels_roles(self):
        messages = [
            make_entry(0, 0, speaker=Speaker.INTERVIEWER).model_copy(update={"text": "Design a URL shortener."}),
            make_entry(1, 0, speaker=Speaker.USER).model_copy(update={"text": "What is the expected QPS?"}),
        ]
        assert format_transcript(messages) == (
            "Interviewer: Design a URL shortener.\n"
            "Candidate: What is the expected QPS?"
        )


class TestFallbackDigest:
    """Test the deterministic local digest."""

    def test_last_five_entries(self):
        messages = make_transcript(12, 40)

        digest = build_fallback_digest(messages)

        lines = digest.splitlines()
        assert len(lines) == 5
        for line, entry in zip(lines, messages[-5:]):
            assert line == f"- {entry.speaker.label}: {entry.text[:100]}..."

    def test_fewer_than_five(self):
        messages = make_transcript(2, 3)
        digest = build_fallback_digest(messages)
        assert digest.splitlines() == [
            f"- Candidate: {messages[0].text}...",
            f"- Interviewer: {messages[1].text}...",
        ]

    def test_truncates_to_hundred_chars(self):
        entry = make_entry(0, 100)
        line = build_fallback_digest([entry])
        assert line == f"- Candidate: {entry.text[:100]}..."
        assert len(line) == len("- Candidate: ") + 100 + 3

    def test_empty_text_still_non_empty(self):
        entry = make_entry(0, 0)
        assert build_fallback_digest([entry]) == "- Candidate: ..."

    def test_empty_input(self):
        assert build_fallback_digest([]) == ""


class TestLLMSummarizationProvider:
    """Test the primary summarization path."""

    @pytest.mark.asyncio
    async def test_calls_collaborator_once(self, fake_llm):
        summarizer = LLMSummarizationProvider(fake_llm)
        messages = make_transcript(10, 5)

        summary = await summarizer.summarize(messages)

        assert summary == "- Candidate clarified the requirements"
        assert len(fake_llm.calls) == 1
        call = fake_llm.calls[0]
        assert call["temperature"] == 0.3
        assert call["max_tokens"] == 500
        assert "model" not in call

    @pytest.mark.asyncio
    async def test_prompt_structure(self, fake_llm):
        summarizer = LLMSummarizationProvider(fake_llm)
        messages = make_transcript(3, 2)

        await summarizer.summarize(messages)

        system, user = fake_llm.calls[0]["messages"]
        assert system.role == "system"
        assert system.content == SUMMARIZER_SYSTEM_PROMPT
        assert user.role == "user"
        assert format_transcript(messages) in user.content
        assert "Requirements/constraints clarified" in user.content
        assert user.content.endswith("Summary (bullet points only):")

    @pytest.mark.asyncio
    async def test_result_is_trimmed(self):
        llm = FakeLLMProvider(content="\n  - Chose Cassandra for writes  \n")
        summary = await LLMSummarizationProvider(llm).summarize(make_transcript(2, 2))
        assert summary == "- Chose Cassandra for writes"

    @pytest.mark.asyncio
    async def test_model_override(self, fake_llm):
        summarizer = LLMSummarizationProvider(fake_llm, model="gpt-4o-mini")
        await summarizer.summarize(make_transcript(2, 2))
        assert fake_llm.calls[0]["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_empty_input_skips_call(self, fake_llm):
        summary = await LLMSummarizationProvider(fake_llm).summarize([])
        assert summary == ""
        assert fake_llm.calls == []

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, failing_llm):
        messages = make_transcript(9, 60)

        summary = await LLMSummarizationProvider(failing_llm).summarize(messages)

        assert failing_llm.calls == 1
        assert summary == build_fallback_digest(messages)

    @pytest.mark.asyncio
    async def test_unexpected_error_falls_back(self):
        llm = FailingLLMProvider(RuntimeError("connection reset"))
        messages = make_transcript(3, 5)

        summary = await LLMSummarizationProvider(llm).summarize(messages)

        assert summary == build_fallback_digest(messages)

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self):
        llm = FakeLLMProvider(delay=1.0)
        messages = make_transcript(6, 5)

        summary = await LLMSummarizationProvider(llm, timeout=0.01).summarize(messages)

        assert summary == build_fallback_digest(messages)

    @pytest.mark.asyncio
    async def test_missing_content_falls_back(self):
        llm = FakeLLMProvider(content=None)
        messages = make_transcript(6, 5)

        summary = await LLMSummarizationProvider(llm).summarize(messages)

        assert summary == build_fallback_digest(messages)

    @pytest.mark.asyncio
    async def test_whitespace_content_falls_back(self):
        llm = FakeLLMProvider(content="   \n ")
        messages = make_transcript(6, 5)

        summary = await LLMSummarizationProvider(llm).summarize(messages)

        assert summary == build_fallback_digest(messages)

    @pytest.mark.asyncio
    async def test_from_budget(self, failing_llm):
        budget = ContextBudget(
            summary_max_tokens=200,
            summary_temperature=0.1,
            fallback_max_entries=1,
            fallback_max_chars=5,
        )
        summarizer = LLMSummarizationProvider.from_budget(failing_llm, budget)
        messages = make_transcript(4, 10)

        summary = await summarizer.summarize(messages)

        assert summarizer.max_tokens == 200
        assert summarizer.temperature == 0.1
        assert summary == f"- Interviewer: {messages[-1].text[:5]}..."


class TestGenerateText:
    """Malformed responses surface as provider errors."""

    @pytest.mark.asyncio
    async def test_empty_content_raises(self):
        with pytest.raises(LLMProviderError, match="No content"):
            await FakeLLMProvider(content="").generate_text([])

    @pytest.mark.asyncio
    async def test_returns_content(self):
        assert await FakeLLMProvider(content="ok").generate_text([]) == "ok"


class TestFallbackSummarizationProvider:

    @pytest.mark.asyncio
    async def test_summarize(self):
        messages = make_transcript(7, 30)
        summary = await FallbackSummarizationProvider().summarize(messages)
        assert summary == build_fallback_digest(messages)


class TestDefaultSummarizer:
    """Test the process-wide summarizer factory."""

    def test_fallback_without_api_key(self):
        assert isinstance(get_default_summarizer(), FallbackSummarizationProvider)

    def test_singleton(self):
        assert get_default_summarizer() is get_default_summarizer()

    def test_one_instance_per_budget(self):
        custom = get_default_summarizer(ContextBudget(fallback_max_entries=2))

        assert custom is get_default_summarizer(ContextBudget(fallback_max_entries=2))
        assert custom is not get_default_summarizer()
        assert custom.max_entries == 2
        assert get_default_summarizer().max_entries == 5

    def test_portkey_with_api_key(self, monkeypatch):
        monkeypatch.setenv("PORTKEY_API_KEY", "pk-test")
        monkeypatch.setenv("PORTKEY_VIRTUAL_KEY", "vk-test")
        monkeypatch.setenv("CONTEXT_SUMMARY_MODEL", "gpt-4o-mini")

        summarizer = get_default_summarizer()

        assert isinstance(summarizer, LLMSummarizationProvider)
        assert summarizer.model == "gpt-4o-mini"
        assert summarizer.llm_provider.get_model_info()["provider"] == "Portkey"
