"""LLM-powered article generation."""

from .llm_client import LLMClient, get_anthropic_client, get_gemini_client, with_retry
from .markdown import Summarizer, build_prompt, clean_markdown, format_item

__all__ = [
    "LLMClient",
    "Summarizer",
    "build_prompt",
    "clean_markdown",
    "format_item",
    "get_anthropic_client",
    "get_gemini_client",
    "with_retry",
]
