"""Tests for prompt building, markdown cleanup and the LLM client wrapper."""

import pytest

from listcurator.discovery import RateGovernor
from listcurator.errors import ConfigError, SummarizerError
from listcurator.models import FeedItem, LLMConfig, Segment
from listcurator.summarizer import LLMClient, Summarizer, build_prompt, clean_markdown, format_item, with_retry
from listcurator.summarizer import llm_client


def _thread():
    return FeedItem(
        id="1",
        url="https://x.com/alice/status/1",
        author="alice",
        segments=(
            Segment(text="Intro to RAG", images=("https://pbs.twimg.com/a.jpg",), id="1"),
            Segment(text="Repo here", links=("https://github.com/org/rag",), id="2"),
        ),
    )


class TestPrompt:
    def test_format_item_orders_text_images_links(self):
        text = format_item(_thread())

        assert text == (
            "Intro to RAG\n\n![Image](https://pbs.twimg.com/a.jpg)"
            "\n\nRepo here\n\nLinks:\nhttps://github.com/org/rag"
        )

    def test_build_prompt_includes_every_item(self):
        other = FeedItem(id="2", url="u", segments=(Segment(text="Second topic"),))

        prompt = build_prompt([_thread(), other])

        assert "Intro to RAG" in prompt
        assert "Second topic" in prompt
        assert "2 in total" in prompt
        assert "{content}" not in prompt


class TestCleanMarkdown:
    def test_strips_fences(self):
        assert clean_markdown("```markdown\n### Title\n```") == "### Title"

    def test_strips_outer_rules(self):
        raw = "---\n### One\n\n---\n\n### Two\n---"
        assert clean_markdown(raw) == "### One\n\n---\n\n### Two"

    def test_appends_footer(self):
        assert clean_markdown("### A", footer="Follow us") == "### A\n\nFollow us"


class TestWithRetry:
    def _config(self, **kw):
        base = {"retry_max_attempts": 3, "retry_base_seconds": 10, "retry_max_seconds": 15, "retry_jitter": 0}
        base.update(kw)
        return LLMConfig(**base)

    def test_backoff_is_capped(self, sleeps):
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise RuntimeError("503 overloaded")
            return "ok"

        assert with_retry(flaky, self._config(), sleep=sleeps) == "ok"
        assert sleeps.calls == [10, 15]

    def test_gives_up(self, sleeps):
        def broken():
            raise RuntimeError("500")

        with pytest.raises(RuntimeError):
            with_retry(broken, self._config(), sleep=sleeps)
        assert len(sleeps.calls) == 2

    def test_missing_key_is_not_retried(self, sleeps):
        def no_key():
            raise RuntimeError("GEMINI_API_KEY environment variable not set")

        with pytest.raises(RuntimeError):
            with_retry(no_key, self._config(), sleep=sleeps)
        assert sleeps.calls == []

    def test_config_error_is_not_retried(self, sleeps):
        def bad():
            raise ConfigError("Unknown LLM provider: foo")

        with pytest.raises(ConfigError):
            with_retry(bad, self._config(), sleep=sleeps)
        assert sleeps.calls == []


class TestLLMClient:
    def test_dispatches_to_provider(self, monkeypatch):
        seen = {}

        def fake_gemini(config, prompt, system=None):
            seen["prompt"] = prompt
            seen["system"] = system
            return "### Article"

        monkeypatch.setattr(llm_client, "_call_gemini", fake_gemini)
        client = LLMClient(LLMConfig(provider="gemini"), governor=RateGovernor(0))

        assert client.generate("hello", system="be brief") == "### Article"
        assert seen == {"prompt": "hello", "system": "be brief"}

    def test_every_call_is_paced(self, monkeypatch):
        monkeypatch.setattr(llm_client, "_call_anthropic", lambda config, prompt, system=None: "ok")
        acquired = []

        class CountingGovernor(RateGovernor):
            def acquire(self):
                acquired.append(1)
                return 0.0

        client = LLMClient(LLMConfig(provider="anthropic"), governor=CountingGovernor(0))
        client.generate("a")
        client.generate("b")

        assert len(acquired) == 2

    def test_unknown_provider(self):
        client = LLMClient(LLMConfig(provider="nope"), governor=RateGovernor(0))

        with pytest.raises(ConfigError):
            client.generate("x")

    def test_failures_become_summarizer_errors(self, monkeypatch):
        def broken(config, prompt, system=None):
            raise RuntimeError("quota exhausted")

        monkeypatch.setattr(llm_client, "_call_gemini", broken)
        config = LLMConfig(provider="gemini", retry_max_attempts=2, retry_jitter=0)
        client = LLMClient(config, governor=RateGovernor(0), sleep=lambda s: None)

        with pytest.raises(SummarizerError, match="quota exhausted"):
            client.generate("x")


class FakeClient:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    def generate(self, prompt, system=None):
        self.prompts.append((prompt, system))
        return self.reply


class TestSummarizer:
    def test_no_items_returns_empty(self):
        client = FakeClient("unused")

        assert Summarizer(LLMConfig(), client).generate_markdown([]) == ""
        assert client.prompts == []

    def test_generates_and_cleans(self):
        client = FakeClient("```markdown\n### 🤖 RAG\n\nBody\n```")
        summarizer = Summarizer(LLMConfig(footer="Curated by listcurator"), client)

        markdown = summarizer.generate_markdown([_thread()])

        assert markdown == "### 🤖 RAG\n\nBody\n\nCurated by listcurator"
        prompt, system = client.prompts[0]
        assert "Intro to RAG" in prompt
        assert system

    def test_empty_output_is_an_error(self):
        summarizer = Summarizer(LLMConfig(footer="footer"), FakeClient("```\n```"))

        with pytest.raises(SummarizerError):
            summarizer.generate_markdown([_thread()])
