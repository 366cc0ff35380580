import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from string import Template

import httpx
from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from podscript.ai import helpers, prompts
from podscript.core.config import settings
from podscript.core.errors import GenerationFailed, ParseError
from podscript.models import TopicSuggestion, TopicSuggestions

logger = logging.getLogger(__name__)


class ErrorKind(StrEnum):
    OVERLOADED = "overloaded"
    TIMEOUT = "timeout"
    FATAL = "fatal"


class ProviderError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.kind in (ErrorKind.OVERLOADED, ErrorKind.TIMEOUT)


@dataclass
class GenerationOptions:
    model: str = settings.gemini_model
    temperature: float = 0.7
    max_output_tokens: int = 4096
    system_instruction: str | None = None
    json_output: bool = False
    # Thinking tokens count against max_output_tokens on 2.5 models, 0 disables thinking
    thinking_budget: int | None = None


@dataclass
class RetryPolicy:
    max_attempts: int = settings.generation_max_attempts
    base_delay: float = settings.generation_base_delay_seconds
    timeout: float | None = settings.generation_timeout_seconds

    def delay(self, attempt: int) -> float:
        """Backoff before retrying the zero-indexed `attempt` that just failed."""
        return self.base_delay * 2**attempt


def classify_error(error: Exception) -> ErrorKind:
    if isinstance(error, errors.APIError):
        if error.code == 503 or "overloaded" in str(error.message or "").lower():
            return ErrorKind.OVERLOADED
        return ErrorKind.FATAL
    if isinstance(error, (TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    return ErrorKind.FATAL


class GeminiProvider:
    """Adapter over the Gemini SDK. Provider failures leave here as ProviderError."""

    def __init__(self, gemini_client: genai.Client):
        self.gemini_client = gemini_client

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        try:
            response = await self.gemini_client.aio.models.generate_content(
                model=options.model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    temperature=options.temperature,
                    max_output_tokens=options.max_output_tokens,
                    system_instruction=options.system_instruction,
                    response_mime_type="application/json" if options.json_output else None,
                    thinking_config=(
                        types.ThinkingConfig(thinking_budget=options.thinking_budget)
                        if options.thinking_budget is not None
                        else None
                    ),
                ),
            )
        except Exception as e:
            raise ProviderError(classify_error(e), str(e)) from e

        return response.text or ""


class LLM:
    def __init__(self, provider: GeminiProvider, policy: RetryPolicy | None = None):
        self.provider = provider
        self.policy = policy or RetryPolicy()

    async def complete(self, prompt: str, options: GenerationOptions | None = None) -> str:
        options = options or GenerationOptions()
        policy = self.policy

        for attempt in range(policy.max_attempts):
            try:
                text = await self._attempt(prompt, options)
            except ProviderError as e:
                is_last_attempt = attempt == policy.max_attempts - 1
                logger.warning(
                    "Generation attempt %d/%d failed (%s): %s",
                    attempt + 1,
                    policy.max_attempts,
                    e.kind,
                    e.message,
                )
                if e.retryable and not is_last_attempt:
                    delay = policy.delay(attempt)
                    logger.info("Retrying generation in %.1fs", delay)
                    await asyncio.sleep(delay)
                    continue
                raise GenerationFailed(f"Generation API error: {e.message}") from e

            logger.info(
                "Generation completed: model=%s prompt_length=%d response_length=%d attempt=%d",
                options.model,
                len(prompt),
                len(text),
                attempt + 1,
            )
            return text

        raise GenerationFailed("Generation API error: no attempts were made")

    async def _attempt(self, prompt: str, options: GenerationOptions) -> str:
        if self.policy.timeout is None:
            return await self.provider.generate(prompt, options)
        try:
            return await asyncio.wait_for(
                self.provider.generate(prompt, options), timeout=self.policy.timeout
            )
        except TimeoutError as e:
            raise ProviderError(
                ErrorKind.TIMEOUT, f"Generation timed out after {self.policy.timeout}s"
            ) from e

    async def suggest_topics(self, query: str) -> list[TopicSuggestion]:
        text = await self.complete(
            Template(prompts.topics_user).substitute(query=query),
            GenerationOptions(
                model=settings.gemini_lite_model,
                temperature=0.8,
                max_output_tokens=2048,
                json_output=True,
                thinking_budget=0,
            ),
        )
        data = helpers.extract_json_object(text)
        try:
            return TopicSuggestions.model_validate(data).topics
        except ValidationError as e:
            raise ParseError(f"Invalid topic suggestions: {e}", raw_text=text) from e
