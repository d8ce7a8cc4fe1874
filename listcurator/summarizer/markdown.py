"""Build article prompts from feed items and tidy the model's markdown."""

from __future__ import annotations

import logging
import re

from ..errors import SummarizerError
from ..models.config import LLMConfig
from ..models.feed import FeedItem
from .llm_client import LLMClient
from .prompts import ARTICLE_PROMPT, SYSTEM_PROMPT

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:markdown|md)?")
_LEADING_RULE_RE = re.compile(r"\A\s*---\s*\n")
_TRAILING_RULE_RE = re.compile(r"\n---\s*\Z")


def format_item(item: FeedItem) -> str:
    """Render one conversation for the prompt: text, then images, then links, per post."""
    blocks = []
    for segment in item.segments:
        content = segment.text
        if segment.images:
            content += "\n\n" + "\n".join(f"![Image]({src})" for src in segment.images)
        if segment.links:
            content += "\n\nLinks:\n" + "\n".join(segment.links)
        blocks.append(content)
    return "\n\n".join(blocks)


def build_prompt(items: list[FeedItem]) -> str:
    content = "\n\n---\n\n".join(format_item(item) for item in items)
    return ARTICLE_PROMPT.format(content=content, count=len(items))


def clean_markdown(text: str, footer: str = "") -> str:
    """Strip code fences and stray leading/trailing rules, then append ``footer``."""
    text = _FENCE_RE.sub("", text).strip()
    text = _LEADING_RULE_RE.sub("", text)
    text = _TRAILING_RULE_RE.sub("", text).strip()
    if footer:
        text = f"{text}\n\n{footer.strip()}"
    return text


class Summarizer:
    """Turn a batch of feed items into one markdown document."""

    def __init__(self, config: LLMConfig | None = None, client: LLMClient | None = None):
        self.config = config or LLMConfig()
        self.client = client or LLMClient(self.config)

    def generate_markdown(self, items: list[FeedItem]) -> str:
        if not items:
            log.warning("No items to summarize")
            return ""

        prompt = build_prompt(items)
        log.info("Summarizing %d items with %s/%s", len(items), self.config.provider, self.config.model)
        raw = self.client.generate(prompt, system=SYSTEM_PROMPT)
        markdown = clean_markdown(raw, self.config.footer)
        if not markdown.strip() or markdown.strip() == self.config.footer.strip():
            raise SummarizerError("Model returned no content")
        return markdown
