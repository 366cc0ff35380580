"""
Tests for podscript/ai/models.py -- generation client retry policy and provider adapter.

Verifies:
  1. Overload errors are retried with delays of base_delay * 2**attempt
  2. At most max_attempts calls are made before GenerationFailed
  3. Non-overload errors fail after a single attempt
  4. Timeouts count as retryable attempts
  5. Empty responses are returned without retrying
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors

from podscript.ai.models import (
    LLM,
    ErrorKind,
    GeminiProvider,
    GenerationOptions,
    ProviderError,
    RetryPolicy,
    classify_error,
)
from podscript.core.errors import GenerationFailed, ParseError


class ScriptedProvider:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def generate(self, prompt, options):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class HangingProvider:
    def __init__(self):
        self.calls = 0

    async def generate(self, prompt, options):
        self.calls += 1
        await asyncio.Event().wait()


def overloaded():
    return ProviderError(ErrorKind.OVERLOADED, "Overloaded")


# ---------------------------------------------------------------------------
# RetryPolicy
# ---------------------------------------------------------------------------


class TestRetryPolicy:
    def test_exponential_delays(self):
        policy = RetryPolicy(max_attempts=3, base_delay=1.0, timeout=None)
        assert [policy.delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]


# ---------------------------------------------------------------------------
# LLM.complete
# ---------------------------------------------------------------------------


class TestComplete:
    def _run(self, coro):
        return asyncio.run(coro)

    def test_retries_overload_then_succeeds(self):
        provider = ScriptedProvider([overloaded(), overloaded(), "final text"])
        llm = LLM(provider, RetryPolicy(max_attempts=3, base_delay=1.0, timeout=None))
        sleep = AsyncMock()

        with patch("podscript.ai.models.asyncio.sleep", sleep):
            result = self._run(llm.complete("prompt"))

        assert result == "final text"
        assert provider.calls == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    def test_gives_up_after_max_attempts(self):
        provider = ScriptedProvider([overloaded() for _ in range(5)])
        llm = LLM(provider, RetryPolicy(max_attempts=3, base_delay=1.0, timeout=None))
        sleep = AsyncMock()

        with patch("podscript.ai.models.asyncio.sleep", sleep):
            with pytest.raises(GenerationFailed) as ctx:
                self._run(llm.complete("prompt"))

        assert provider.calls == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
        assert "Overloaded" in ctx.value.message

    def test_no_retry_on_fatal_error(self):
        provider = ScriptedProvider([ProviderError(ErrorKind.FATAL, "Invalid API key")])
        llm = LLM(provider, RetryPolicy(max_attempts=3, base_delay=1.0, timeout=None))
        sleep = AsyncMock()

        with patch("podscript.ai.models.asyncio.sleep", sleep):
            with pytest.raises(GenerationFailed, match="Invalid API key"):
                self._run(llm.complete("prompt"))

        assert provider.calls == 1
        sleep.assert_not_awaited()

    def test_timeout_is_retried(self):
        provider = HangingProvider()
        llm = LLM(provider, RetryPolicy(max_attempts=2, base_delay=0.0, timeout=0.01))

        with pytest.raises(GenerationFailed, match="timed out"):
            self._run(llm.complete("prompt"))

        assert provider.calls == 2

    def test_empty_response_is_not_retried(self):
        provider = ScriptedProvider(["", "never used"])
        llm = LLM(provider, RetryPolicy(max_attempts=3, base_delay=0.0, timeout=None))

        assert self._run(llm.complete("prompt")) == ""
        assert provider.calls == 1

    def test_passes_options_to_provider(self):
        provider = MagicMock()
        provider.generate = AsyncMock(return_value="ok")
        llm = LLM(provider, RetryPolicy(timeout=None))
        options = GenerationOptions(model="m", temperature=0.1, max_output_tokens=10)

        self._run(llm.complete("hello", options))

        provider.generate.assert_awaited_once_with("hello", options)


# ---------------------------------------------------------------------------
# Error classification and the Gemini adapter
# ---------------------------------------------------------------------------


class TestClassifyError:
    def test_503_is_overloaded(self):
        error = errors.ServerError(
            503,
            {"error": {"code": 503, "message": "The model is overloaded.", "status": "UNAVAILABLE"}},
        )
        assert classify_error(error) == ErrorKind.OVERLOADED

    def test_overloaded_message_is_overloaded(self):
        error = errors.ServerError(
            500, {"error": {"code": 500, "message": "Service overloaded", "status": "INTERNAL"}}
        )
        assert classify_error(error) == ErrorKind.OVERLOADED

    def test_client_error_is_fatal(self):
        error = errors.ClientError(
            400,
            {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}},
        )
        assert classify_error(error) == ErrorKind.FATAL

    def test_timeout_is_timeout(self):
        assert classify_error(TimeoutError()) == ErrorKind.TIMEOUT

    def test_unknown_error_is_fatal(self):
        assert classify_error(RuntimeError("boom")) == ErrorKind.FATAL


class TestGeminiProvider:
    def _client(self, **kwargs):
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(**kwargs)
        return client

    def test_returns_text_and_builds_config(self):
        client = self._client(return_value=SimpleNamespace(text="generated"))
        provider = GeminiProvider(client)
        options = GenerationOptions(
            model="gemini-test",
            temperature=0.3,
            max_output_tokens=123,
            system_instruction="be brief",
            json_output=True,
        )

        result = asyncio.run(provider.generate("prompt", options))

        assert result == "generated"
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == ["prompt"]
        assert kwargs["config"].max_output_tokens == 123
        assert kwargs["config"].temperature == 0.3
        assert kwargs["config"].response_mime_type == "application/json"

    def test_thinking_budget_is_passed(self):
        client = self._client(return_value=SimpleNamespace(text="ok"))
        options = GenerationOptions(max_output_tokens=80, thinking_budget=0)

        asyncio.run(GeminiProvider(client).generate("prompt", options))

        config = client.aio.models.generate_content.await_args.kwargs["config"]
        assert config.thinking_config.thinking_budget == 0
        assert config.max_output_tokens == 80

    def test_thinking_left_to_model_by_default(self):
        client = self._client(return_value=SimpleNamespace(text="ok"))

        asyncio.run(GeminiProvider(client).generate("prompt", GenerationOptions()))

        config = client.aio.models.generate_content.await_args.kwargs["config"]
        assert config.thinking_config is None

    def test_missing_text_becomes_empty_string(self):
        client = self._client(return_value=SimpleNamespace(text=None))
        result = asyncio.run(GeminiProvider(client).generate("prompt", GenerationOptions()))
        assert result == ""

    def test_wraps_sdk_errors(self):
        client = self._client(
            side_effect=errors.ServerError(
                503,
                {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}},
            )
        )
        with pytest.raises(ProviderError) as ctx:
            asyncio.run(GeminiProvider(client).generate("prompt", GenerationOptions()))
        assert ctx.value.kind == ErrorKind.OVERLOADED
        assert ctx.value.retryable


# ---------------------------------------------------------------------------
# suggest_topics
# ---------------------------------------------------------------------------


class TestSuggestTopics:
    def test_parses_fenced_json(self):
        text = (
            "Here you go:\n```json\n"
            '{"topics": [{"title": "Lost scripts", "description": "Why writing systems die",'
            ' "tags": ["history"]}]}\n```'
        )
        llm = LLM(ScriptedProvider([text]), RetryPolicy(timeout=None))

        topics = asyncio.run(llm.suggest_topics("ancient languages"))

        assert [t.title for t in topics] == ["Lost scripts"]
        assert topics[0].tags == ["history"]

    def test_invalid_shape_raises_parse_error(self):
        llm = LLM(ScriptedProvider(['{"ideas": []}']), RetryPolicy(timeout=None))
        with pytest.raises(ParseError):
            asyncio.run(llm.suggest_topics("anything"))
