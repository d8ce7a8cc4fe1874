"""Discord webhook notifications for monitored list posts."""

import logging

import httpx

from .models.feed import FeedItem
from .models.results import NotifyDecision

log = logging.getLogger(__name__)

EMBED_COLOR = 0x1DA1F2
MAX_DESCRIPTION_LENGTH = 4000  # Discord caps embed descriptions at 4096


def should_notify(text: str, keywords: list[str] | None = None, send_all: bool = False) -> NotifyDecision:
    """Decide whether a post goes to the webhook based on keyword matching."""
    if send_all:
        return NotifyDecision(send=True, reason="send_all enabled")
    if not keywords:
        return NotifyDecision(send=True, reason="no keywords configured, sending all")

    lowered = (text or "").lower()
    matched = [k for k in keywords if k.lower() in lowered]
    if matched:
        return NotifyDecision(send=True, reason=f"contains keywords: {', '.join(matched)}")
    return NotifyDecision(send=False, reason=f"no matching keywords (looking for: {', '.join(keywords)})")


def build_embed(item: FeedItem) -> dict:
    """Format a feed item as a Discord embed."""
    description = item.aggregate_text or "No text content"
    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH] + "... (truncated)"

    footer = "Posted on X"
    images = item.images
    videos = item.videos
    if images:
        footer += f" • {len(images)} images"
    if videos:
        footer += f" • {len(videos)} videos"

    embed = {
        "title": f"New post from @{item.author or 'unknown'}",
        "url": item.url,
        "description": description,
        "color": EMBED_COLOR,
        "footer": {"text": footer},
    }
    if images:
        embed["image"] = {"url": images[0]}
    if item.timestamp:
        embed["timestamp"] = item.timestamp
    return embed


def send_discord(item: FeedItem, webhook_url: str, timeout: float = 10.0) -> bool:
    """Post one item to a Discord webhook. Returns ``True`` on success."""
    if not webhook_url:
        log.warning("Discord webhook URL not configured")
        return False

    try:
        response = httpx.post(webhook_url, json={"embeds": [build_embed(item)]}, timeout=timeout)
    except httpx.HTTPError as e:
        log.error("Discord webhook request failed: %s", e)
        return False

    if response.status_code in (200, 204):
        log.info("Discord webhook sent for %s", item.id)
        return True
    log.warning("Discord webhook returned %s: %s", response.status_code, response.text[:200])
    return False
