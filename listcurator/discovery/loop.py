"""Scroll-discovery loop: surface new, substantive feed items from an infinite-scroll page."""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable

from ..errors import SessionError
from ..models.config import DiscoveryOptions, SelectorConfig
from ..models.feed import FeedItem
from .extractor import ThreadExtractor
from .governor import RateGovernor
from .ledger import DedupLedger
from .session import Session

log = logging.getLogger(__name__)


class DiscoveryState(enum.Enum):
    AWAITING_INITIAL_CONTENT = "awaiting_initial_content"
    SCROLLING = "scrolling"
    EXTRACTING = "extracting"
    TERMINATED = "terminated"


class TerminationReason(enum.Enum):
    TARGET_REACHED = "target_reached"
    MAX_SCROLL_ATTEMPTS = "max_scroll_attempts"
    STALLED = "stalled"


def is_acceptable(item: FeedItem, min_words: int) -> bool:
    """Substantive enough to keep: enough words, or any media or outbound link."""
    if item.has_media or item.has_links:
        return True
    words = item.word_count
    return words > 0 and words >= min_words


def is_promotional(item: FeedItem, options: DiscoveryOptions) -> bool:
    """Engagement bait or a short giveaway/contest post."""
    text = item.aggregate_text
    if any(phrase in text for phrase in options.reject_phrases):
        return True
    return len(text) < options.short_post_chars and any(phrase in text for phrase in options.reject_short_phrases)


class DiscoveryLoop:
    """Drive one discovery call against a session.

    Element handles live only inside ``_extract_pass``; every pass re-queries
    the document. Only the ids observed in the previous pass carry over.
    """

    def __init__(
        self,
        session: Session,
        options: DiscoveryOptions | None = None,
        ledger: DedupLedger | None = None,
        extractor: ThreadExtractor | None = None,
        sleep: Callable[[float], None] = time.sleep,
        selectors: SelectorConfig | None = None,
    ):
        self.session = session
        self.options = options or DiscoveryOptions()
        self.ledger = ledger if ledger is not None else DedupLedger()
        self.selectors = selectors or (extractor.selectors if extractor else SelectorConfig())
        self.extractor = extractor or ThreadExtractor(session, self.selectors, sleep=sleep)
        self._sleep = sleep

        self.state = DiscoveryState.AWAITING_INITIAL_CONTENT
        self.termination: TerminationReason | None = None
        self.results: list[FeedItem] = []
        self.scroll_attempts = 0
        self.stall_count = 0
        self._previous_ids: set[str] = set()
        self._previous_height: int | None = None

    def run(self) -> list[FeedItem]:
        opts = self.options
        self._await_initial_content()

        while self.termination is None:
            self.state = DiscoveryState.SCROLLING
            height = self._scroll()
            self.scroll_attempts += 1

            self.state = DiscoveryState.EXTRACTING
            observed, accepted = self._extract_pass()

            new_observed = bool(observed - self._previous_ids)
            height_unchanged = height == self._previous_height
            if accepted:
                self.stall_count = 0
            elif not new_observed or height_unchanged:
                self.stall_count += 1
            self._previous_ids = observed
            self._previous_height = height

            log.debug(
                "Pass %d: observed=%d accepted=%d total=%d stall=%d height=%d",
                self.scroll_attempts,
                len(observed),
                accepted,
                len(self.results),
                self.stall_count,
                height,
            )

            if len(self.results) >= opts.target_count:
                self.termination = TerminationReason.TARGET_REACHED
            elif self.stall_count >= opts.max_consecutive_no_new_content:
                self.termination = TerminationReason.STALLED
            elif self.scroll_attempts >= opts.max_scroll_attempts:
                self.termination = TerminationReason.MAX_SCROLL_ATTEMPTS

        self.state = DiscoveryState.TERMINATED
        log.info(
            "Discovery finished (%s): %d items after %d scrolls",
            self.termination.value,
            len(self.results),
            self.scroll_attempts,
        )
        return self.results

    def _await_initial_content(self) -> None:
        self.state = DiscoveryState.AWAITING_INITIAL_CONTENT
        found = self.session.wait_for_item(self.selectors.item, self.options.initial_wait_seconds)
        if not found:
            log.warning(
                "No feed items after %.1fs, scrolling anyway",
                self.options.initial_wait_seconds,
            )
        self._previous_height = self.session.document_scroll_height()

    def _scroll(self) -> int:
        self.session.scroll_to_bottom()
        if self.options.scroll_pause_seconds > 0:
            self._sleep(self.options.scroll_pause_seconds)
        return self.session.document_scroll_height()

    def _extract_pass(self) -> tuple[set[str], int]:
        """Process every currently visible item once. Returns (observed ids, accepted count)."""
        observed: set[str] = set()
        accepted = 0
        items = self.session.query_visible_items(self.selectors.item)

        for element in items:
            if len(self.results) >= self.options.target_count:
                break
            try:
                item_id = self.extractor.item_id(element)
                if item_id is None:
                    continue
                observed.add(item_id)
                if self.ledger.has(item_id):
                    continue

                item = self.extractor.extract(element)
                if item is None:
                    continue
                if not is_acceptable(item, self.options.min_acceptance_signal):
                    log.debug("Rejected %s: %d words, no media or links", item.id, item.word_count)
                    continue
                if is_promotional(item, self.options):
                    log.debug("Rejected %s: promotional", item.id)
                    continue

                for member_id in item.member_ids:
                    self.ledger.add(member_id)
                    observed.add(member_id)
                self.results.append(item)
                accepted += 1
                log.debug("Accepted %s (%d segments)", item.id, len(item.segments))
            except SessionError:
                raise
            except Exception as e:
                log.warning("Skipping item after extraction error: %s", e)
        return observed, accepted


def discover_content(
    session: Session,
    options: DiscoveryOptions | None = None,
    ledger: DedupLedger | None = None,
    sleep: Callable[[float], None] = time.sleep,
    extractor: ThreadExtractor | None = None,
) -> list[FeedItem]:
    """Collect up to ``options.target_count`` new items from the page the session is on.

    Never raises for short or empty results. ``SessionError`` propagates when
    the page itself stops responding.
    """
    loop = DiscoveryLoop(session, options, ledger, extractor=extractor, sleep=sleep)
    return loop.run()


def fetch_feed(
    session: Session,
    url: str,
    options: DiscoveryOptions | None = None,
    ledger: DedupLedger | None = None,
    governor: RateGovernor | None = None,
    extractor: ThreadExtractor | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[FeedItem]:
    """Rate-limit, navigate to ``url`` and discover new items there."""
    if governor is not None:
        governor.acquire()
    log.info("Fetching feed %s", url)
    session.navigate(url)

    ledger = ledger if ledger is not None else DedupLedger()
    items = discover_content(session, options, ledger, sleep=sleep, extractor=extractor)
    ledger.compact_if_oversized()
    return items
