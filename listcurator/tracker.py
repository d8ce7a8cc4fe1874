"""Monitor mode: watch one list and push new matching posts to Discord."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from .auth import get_x_credentials
from .browser import BrowserHandle, cleanup_screenshots, launch_browser, login
from .discovery import DedupLedger, ThreadExtractor, discover_content
from .errors import NavigationError
from .models.config import CuratorConfig, DiscoveryOptions
from .models.feed import FeedItem
from .notifier import send_discord, should_notify
from .pipeline import list_url

log = logging.getLogger(__name__)


class ListTracker:
    """Poll a single list and notify on new posts.

    The first pass only records a baseline. Later passes notify about posts
    the ledger has not seen. The browser is recycled when it gets old, keeps
    failing, or has gone too long without a successful check.
    """

    def __init__(
        self,
        config: CuratorConfig,
        list_id: str,
        webhook_url: str | None = None,
        browser_factory: Callable[[], BrowserHandle] | None = None,
        authenticate: Callable[[BrowserHandle], None] | None = None,
        notify: Callable[[FeedItem], bool] | None = None,
        screenshot_dir: Path | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ):
        self.config = config
        self.list_id = list_id
        self.url = list_url(list_id)
        self.browser_factory = browser_factory or (lambda: launch_browser(config.browser))
        self.authenticate = authenticate or self._login
        self.webhook_url = webhook_url
        self.notify = notify or self._send
        self.screenshot_dir = screenshot_dir
        self.ledger = DedupLedger(config.discovery.ledger_ceiling)

        self._clock = clock
        self._stop = threading.Event()
        self._sleep = sleep or self._stop.wait
        self._handle: BrowserHandle | None = None

        self.checks = 0
        self.consecutive_failures = 0
        self.last_success = clock()
        self.notified = 0

    # -- browser ------------------------------------------------------------

    def _login(self, handle: BrowserHandle) -> None:
        login(handle.page, get_x_credentials(), self.config.browser, screenshot_dir=self.screenshot_dir)

    def _send(self, item: FeedItem) -> bool:
        return send_discord(item, self.webhook_url or "", self.config.discord.timeout_seconds)

    def ensure_session(self) -> BrowserHandle:
        if self._handle is None:
            handle = self.browser_factory()
            try:
                self.authenticate(handle)
            except Exception:
                handle.close()
                raise
            self._handle = handle
        return self._handle

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def refresh_browser(self) -> None:
        log.info("Refreshing browser session")
        self.close()
        self.ensure_session()
        self.consecutive_failures = 0
        self.last_success = self._clock()

    def should_refresh(self) -> bool:
        tc = self.config.tracker
        if self._handle is None:
            return False
        now = self._clock()
        return (
            self._handle.age_seconds(now) > tc.browser_max_age_seconds
            or self.consecutive_failures >= tc.refresh_after_failures
            or now - self.last_success > tc.max_idle_seconds
        )

    # -- checks -------------------------------------------------------------

    def _options(self) -> DiscoveryOptions:
        dc = self.config.discovery
        tc = self.config.tracker
        return DiscoveryOptions(
            target_count=dc.target_count,
            max_scroll_attempts=tc.max_scroll_attempts,
            scroll_pause_seconds=dc.scroll_pause_seconds,
            max_consecutive_no_new_content=dc.max_consecutive_no_new_content,
            min_acceptance_signal=tc.min_acceptance_signal,
            initial_wait_seconds=dc.initial_wait_seconds,
            # Keyword matching decides what gets forwarded.
            reject_phrases=[],
            reject_short_phrases=[],
        )

    def _navigate(self, handle: BrowserHandle) -> None:
        tc = self.config.tracker
        for attempt in range(1, tc.navigation_attempts + 1):
            try:
                handle.session.navigate(self.url)
                return
            except NavigationError as e:
                if attempt >= tc.navigation_attempts:
                    raise
                log.warning("Navigation attempt %d/%d failed: %s", attempt, tc.navigation_attempts, e)
                self._sleep(tc.navigation_retry_seconds)

    def fetch_new(self) -> list[FeedItem]:
        handle = self.ensure_session()
        self._navigate(handle)
        dc = self.config.discovery
        extractor = ThreadExtractor(
            handle.session,
            self.config.selectors,
            retry_attempts=dc.extract_retry_attempts,
            retry_delay=dc.extract_retry_delay,
            max_thread_length=dc.max_thread_length,
            sleep=self._sleep,
        )
        return discover_content(handle.session, self._options(), self.ledger, sleep=self._sleep, extractor=extractor)

    def baseline(self) -> int:
        items = self.fetch_new()
        log.info("Baseline set with %d posts", len(items))
        return len(items)

    def check_once(self) -> list[FeedItem]:
        """Fetch new posts and notify about the ones that match. Returns the notified posts."""
        tc = self.config.tracker
        items = self.fetch_new()
        if not items:
            log.info("No new posts")
            return []

        log.info("Found %d new post(s)", len(items))
        sent = []
        for item in items:
            decision = should_notify(item.aggregate_text, tc.keywords, tc.send_all)
            if not decision.send:
                log.info("Skipping %s (%s)", item.id, decision.reason)
                continue
            log.info("Notifying %s by @%s (%s)", item.id, item.author or "unknown", decision.reason)
            if self.notify(item):
                sent.append(item)
                self.notified += 1
            else:
                log.warning("Failed to deliver notification for %s", item.id)
        return sent

    # -- loop ---------------------------------------------------------------

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _housekeeping(self) -> None:
        if self.checks % self.config.tracker.compact_every_checks == 0:
            self.ledger.compact_if_oversized()
            if self.screenshot_dir is not None:
                cleanup_screenshots(self.screenshot_dir)

    def run(self, max_checks: int | None = None) -> None:
        tc = self.config.tracker
        log.info("Tracking list %s every %.0fs", self.list_id, tc.check_interval_seconds)
        if tc.send_all or not tc.keywords:
            log.info("Notification mode: all posts")
        else:
            log.info("Keywords: %s", ", ".join(tc.keywords))

        try:
            self.baseline()
            self.last_success = self._clock()

            while not self.stopped and (max_checks is None or self.checks < max_checks):
                self.checks += 1
                self._housekeeping()
                try:
                    if self.should_refresh():
                        self.refresh_browser()
                    self.check_once()
                    self.consecutive_failures = 0
                    self.last_success = self._clock()
                except Exception as e:
                    self.consecutive_failures += 1
                    log.error("Check #%d failed (%d in a row): %s", self.checks, self.consecutive_failures, e)
                    if self.consecutive_failures >= tc.recover_after_failures:
                        log.error("Too many consecutive failures, attempting full recovery")
                        try:
                            self.refresh_browser()
                        except Exception as recovery_error:
                            log.error("Recovery failed: %s", recovery_error)

                if self.stopped or (max_checks is not None and self.checks >= max_checks):
                    break
                self._sleep(tc.check_interval_seconds)
        finally:
            self.close()
            if self.screenshot_dir is not None:
                cleanup_screenshots(self.screenshot_dir)
        log.info("Tracker stopped after %d checks (%d notifications)", self.checks, self.notified)
