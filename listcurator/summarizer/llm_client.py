"""LLM client infrastructure: provider dispatch and retry logic."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

from anthropic import Anthropic

from ..auth import get_api_key
from ..discovery.governor import RateGovernor
from ..errors import ConfigError, SummarizerError
from ..models.config import LLMConfig

log = logging.getLogger(__name__)

T = TypeVar("T")


def get_anthropic_client() -> Anthropic:
    """Get an Anthropic client."""
    return Anthropic(api_key=get_api_key("ANTHROPIC_API_KEY"))


def get_gemini_client():
    """Get a Gemini client using the google.genai SDK."""
    from google import genai

    return genai.Client(api_key=get_api_key("GEMINI_API_KEY"))


def _call_anthropic(config: LLMConfig, prompt: str, system: str | None = None) -> str:
    client = get_anthropic_client()
    kwargs = {}
    if system:
        kwargs["system"] = system
    response = client.messages.create(
        model=config.model,
        max_tokens=config.max_output_tokens,
        temperature=config.temperature,
        messages=[{"role": "user", "content": prompt}],
        **kwargs,
    )
    return response.content[0].text


def _call_gemini(config: LLMConfig, prompt: str, system: str | None = None) -> str:
    from google.genai import types

    client = get_gemini_client()
    config_kwargs: dict = {
        "max_output_tokens": config.max_output_tokens,
        "temperature": config.temperature,
    }
    if system:
        config_kwargs["system_instruction"] = system

    response = client.models.generate_content(
        model=config.model,
        contents=prompt,
        config=types.GenerateContentConfig(**config_kwargs),
    )
    return response.text or ""


def with_retry(
    fn: Callable[[], T],
    config: LLMConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` with exponential backoff and jitter.

    Missing credentials are raised immediately.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except ConfigError:
            raise
        except Exception as exc:
            attempt += 1
            msg = str(exc).lower()
            if "not set" in msg and "api" in msg:
                raise
            if config.retry_max_attempts and attempt >= config.retry_max_attempts:
                raise

            delay = min(config.retry_max_seconds, config.retry_base_seconds * (2 ** (attempt - 1)))
            if config.retry_jitter:
                delay = max(0.0, delay * (1 + random.uniform(-config.retry_jitter, config.retry_jitter)))
            log.warning(
                "LLM call failed (attempt %d/%d), retrying in %.0fs: %s",
                attempt,
                config.retry_max_attempts,
                delay,
                exc,
            )
            sleep(delay)


class LLMClient:
    """Paced, retrying text generation against the configured provider."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        governor: RateGovernor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or LLMConfig()
        self.governor = governor or RateGovernor.per_minute(self.config.requests_per_minute, sleep=sleep)
        self._sleep = sleep

    def _invoke(self, prompt: str, system: str | None) -> str:
        self.governor.acquire()
        if self.config.provider == "gemini":
            return _call_gemini(self.config, prompt, system)
        if self.config.provider == "anthropic":
            return _call_anthropic(self.config, prompt, system)
        raise ConfigError(f"Unknown LLM provider: {self.config.provider}")

    def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            return with_retry(lambda: self._invoke(prompt, system), self.config, sleep=self._sleep)
        except ConfigError:
            raise
        except Exception as e:
            raise SummarizerError(f"{self.config.provider} generation failed: {e}") from e
