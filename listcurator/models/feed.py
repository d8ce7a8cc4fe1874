"""Feed item data model produced by the discovery engine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_WORD_RE = re.compile(r"\S+")


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(_WORD_RE.findall(text or ""))


@dataclass(frozen=True)
class Segment:
    """One post within a thread."""

    text: str = ""
    links: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    videos: tuple[str, ...] = ()
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "links": list(self.links),
            "images": list(self.images),
            "videos": list(self.videos),
        }


@dataclass(frozen=True)
class FeedItem:
    """A post or same-author thread surfaced from a feed.

    ``id`` is parsed from ``url`` and is the dedup key. ``segments`` is in
    document order and every segment shares ``author``.
    """

    id: str
    url: str
    timestamp: str = ""
    author: str = ""
    segments: tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def aggregate_text(self) -> str:
        return "\n\n".join(s.text for s in self.segments if s.text)

    @property
    def word_count(self) -> int:
        return count_words(self.aggregate_text)

    @property
    def links(self) -> list[str]:
        return [link for s in self.segments for link in s.links]

    @property
    def images(self) -> list[str]:
        return [img for s in self.segments for img in s.images]

    @property
    def videos(self) -> list[str]:
        return [vid for s in self.segments for vid in s.videos]

    @property
    def has_media(self) -> bool:
        return any(s.images or s.videos for s in self.segments)

    @property
    def has_links(self) -> bool:
        return any(s.links for s in self.segments)

    @property
    def is_thread(self) -> bool:
        return len(self.segments) > 1

    @property
    def member_ids(self) -> list[str]:
        """Ids of the head post and every continuation post with a known id."""
        ids = [self.id]
        for segment in self.segments:
            if segment.id and segment.id not in ids:
                ids.append(segment.id)
        return ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "timestamp": self.timestamp,
            "author": self.author,
            "segments": [s.to_dict() for s in self.segments],
        }
