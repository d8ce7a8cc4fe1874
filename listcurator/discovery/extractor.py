"""Turn one feed item element into a ``FeedItem``, walking same-author threads."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import TypeVar
from urllib.parse import urljoin, urlparse

from ..errors import ElementReadError, StaleElementError
from ..models.config import SelectorConfig
from ..models.feed import FeedItem, Segment
from .retry import retry_on
from .session import Element, Session

log = logging.getLogger(__name__)

QUOTE_MARKER = "\n\nQuoted post:\n"

T = TypeVar("T")


def optional_read(fn: Callable[[], T], default: T) -> T:
    """Run one optional field read, degrading to ``default`` when it fails.

    Stale-element errors are not absorbed: they invalidate the whole
    extraction and must reach the retry wrapper.
    """
    try:
        result = fn()
    except ElementReadError as e:
        log.debug("Optional read failed: %s", e)
        return default
    return default if result is None else result


class ThreadExtractor:
    """Extract structured fields from a feed item and any same-author continuation."""

    def __init__(
        self,
        session: Session,
        selectors: SelectorConfig | None = None,
        retry_attempts: int = 3,
        retry_delay: float = 0.5,
        max_thread_length: int = 25,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.selectors = selectors or SelectorConfig()
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.max_thread_length = max_thread_length
        self._sleep = sleep
        self._permalink_re = re.compile(self.selectors.permalink_pattern)
        self._internal_hosts = tuple(h.lower() for h in self.selectors.internal_hosts)

    # -- public -------------------------------------------------------------

    def extract(self, item: Element) -> FeedItem | None:
        """Return the item (and its thread) or ``None`` when it cannot be identified."""
        try:
            return retry_on(
                lambda: self._extract_once(item),
                StaleElementError,
                attempts=self.retry_attempts,
                delay=self.retry_delay,
                sleep=self._sleep,
            )
        except StaleElementError as e:
            log.warning("Giving up on item after %d stale reads: %s", self.retry_attempts, e)
            return None

    def item_id(self, item: Element) -> str | None:
        """Resolve just the permalink id, without reading any content."""
        try:
            permalink = retry_on(
                lambda: self._permalink(self._hrefs(item)),
                StaleElementError,
                attempts=self.retry_attempts,
                delay=self.retry_delay,
                sleep=self._sleep,
            )
        except StaleElementError as e:
            log.debug("Could not resolve item id: %s", e)
            return None
        return permalink[1] if permalink else None

    # -- extraction ---------------------------------------------------------

    def _extract_once(self, item: Element) -> FeedItem | None:
        hrefs = self._hrefs(item)
        permalink = self._permalink(hrefs)
        if permalink is None:
            log.debug("Item has no permalink, skipping")
            return None
        url, item_id = permalink

        author = self._author(item, url)
        timestamp = optional_read(lambda: self._timestamp(item), "")
        segments = [self._segment(item, hrefs, item_id)]

        if author:
            segments.extend(self._walk_thread(item, author))

        return FeedItem(
            id=item_id,
            url=url,
            timestamp=timestamp,
            author=author,
            segments=tuple(segments),
        )

    def _walk_thread(self, item: Element, author: str) -> list[Segment]:
        s = self.selectors
        container = optional_read(lambda: self.session.find_ancestor(item, s.container), None)
        if container is None:
            return []

        continuation: list[Segment] = []
        node = container
        while len(continuation) + 1 < self.max_thread_length:
            current = node
            node = optional_read(lambda: self.session.next_sibling(current), None)
            if node is None:
                break
            sibling = node
            child = optional_read(lambda: self.session.find_descendant(sibling, s.item), None)
            if child is None:
                break

            child_hrefs = self._hrefs(child)
            child_permalink = self._permalink(child_hrefs)
            child_url = child_permalink[0] if child_permalink else ""
            if self._author(child, child_url).casefold() != author.casefold():
                break

            segment = self._segment(child, child_hrefs, child_permalink[1] if child_permalink else "")
            if not segment.text.strip():
                break
            continuation.append(segment)

        if continuation:
            log.debug("Assembled thread of %d posts by @%s", len(continuation) + 1, author)
        return continuation

    def _segment(self, item: Element, hrefs: list[str], segment_id: str) -> Segment:
        return Segment(
            text=self._text(item),
            links=tuple(self._outbound_links(hrefs)),
            images=tuple(self._sources(item, self.selectors.image, ("src",))),
            videos=tuple(self._sources(item, self.selectors.video, ("src", "poster"))),
            id=segment_id,
        )

    # -- field reads --------------------------------------------------------

    def _text(self, item: Element) -> str:
        s = self.selectors
        regions = optional_read(lambda: self.session.find_descendants(item, s.text), [])
        primary = ""
        if regions:
            primary = optional_read(lambda: self.session.read_text(regions[0]), "")

        quoted = ""
        if s.quote_text:
            quote_el = optional_read(lambda: self.session.find_descendant(item, s.quote_text), None)
            if quote_el is not None:
                quoted = optional_read(lambda: self.session.read_text(quote_el), "")
        elif len(regions) > 1:
            quoted = optional_read(lambda: self.session.read_text(regions[1]), "")

        primary = primary.strip()
        quoted = quoted.strip()
        if quoted:
            return f"{primary}{QUOTE_MARKER}{quoted}"
        return primary

    def _hrefs(self, item: Element) -> list[str]:
        anchors = optional_read(lambda: self.session.find_descendants(item, self.selectors.link), [])
        hrefs = []
        for anchor in anchors:
            href = optional_read(lambda: self.session.read_attribute(anchor, "href"), "")
            if href:
                hrefs.append(href)
        return hrefs

    def _sources(self, item: Element, selector: str, attributes: tuple[str, ...]) -> list[str]:
        elements = optional_read(lambda: self.session.find_descendants(item, selector), [])
        sources = []
        for element in elements:
            for attribute in attributes:
                value = optional_read(lambda: self.session.read_attribute(element, attribute), "")
                # blob: URLs only exist inside the page that created them
                if value and not value.startswith("blob:"):
                    sources.append(value)
                    break
        return sources

    def _timestamp(self, item: Element) -> str:
        time_el = self.session.find_descendant(item, self.selectors.time)
        if time_el is None:
            return ""
        return self.session.read_attribute(time_el, "datetime") or ""

    def _author(self, item: Element, permalink_url: str) -> str:
        def from_name_link() -> str:
            link = self.session.find_descendant(item, self.selectors.author_link)
            if link is None:
                return ""
            href = self.session.read_attribute(link, "href") or ""
            return _last_path_segment(href)

        author = optional_read(from_name_link, "")
        if not author and permalink_url:
            author = _handle_from_permalink(permalink_url)
        return author

    # -- url helpers --------------------------------------------------------

    def _permalink(self, hrefs: list[str]) -> tuple[str, str] | None:
        for href in hrefs:
            absolute = urljoin(self.selectors.site_origin, href)
            parsed = urlparse(absolute)
            match = self._permalink_re.search(parsed.path)
            if not match:
                continue
            try:
                item_id = match.group(1)
            except IndexError:
                return None
            if not item_id:
                return None
            canonical = f"{parsed.scheme}://{parsed.netloc}{parsed.path[: match.end()]}"
            return canonical, item_id
        return None

    def _outbound_links(self, hrefs: list[str]) -> list[str]:
        links: list[str] = []
        for href in hrefs:
            absolute = urljoin(self.selectors.site_origin, href)
            parsed = urlparse(absolute)
            if parsed.scheme not in ("http", "https"):
                continue
            host = (parsed.hostname or "").lower()
            if self._is_internal(host):
                continue
            if absolute not in links:
                links.append(absolute)
        return links

    def _is_internal(self, host: str) -> bool:
        return any(host == h or host.endswith("." + h) for h in self._internal_hosts)


def _last_path_segment(href: str) -> str:
    path = urlparse(href).path.rstrip("/")
    return path.rsplit("/", 1)[-1] if path else ""


def _handle_from_permalink(url: str) -> str:
    parts = [p for p in urlparse(url).path.split("/") if p]
    if "status" in parts:
        idx = parts.index("status")
        if idx > 0:
            return parts[idx - 1]
    return ""
