"""Pipeline orchestrator: discover, summarize, publish and announce per folder."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from pathlib import Path

from .auth import get_x_credentials
from .browser import BrowserHandle, cleanup_screenshots, launch_browser, login, post_status, save_screenshot
from .discovery import DedupLedger, RateGovernor, ThreadExtractor, fetch_feed
from .errors import ListCuratorError, PublishError, SessionError
from .models.config import CuratorConfig, Folder
from .models.feed import FeedItem
from .models.results import FolderResult
from .publisher import GitHubPublisher, readme_header
from .summarizer import Summarizer

log = logging.getLogger(__name__)

LIST_URL = "https://x.com/i/lists/{list_id}"


def list_url(list_id: str) -> str:
    return LIST_URL.format(list_id=list_id)


class Curator:
    """Runs the curated-list pipeline folder by folder.

    The browser is opened lazily and reused across folders; a session-level
    failure discards it so the next attempt starts from a fresh browser.
    """

    def __init__(
        self,
        config: CuratorConfig,
        summarizer: Summarizer,
        publisher: GitHubPublisher,
        browser_factory: Callable[[], BrowserHandle] | None = None,
        authenticate: Callable[[BrowserHandle], None] | None = None,
        announce: Callable[[BrowserHandle, str], bool] | None = None,
        screenshot_dir: Path | None = None,
        ledger: DedupLedger | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ):
        self.config = config
        self.summarizer = summarizer
        self.publisher = publisher
        self.browser_factory = browser_factory or (lambda: launch_browser(config.browser))
        self.authenticate = authenticate or self._login
        self.announce = announce or self._post_announcement
        self.screenshot_dir = screenshot_dir
        self.ledger = ledger if ledger is not None else DedupLedger(config.discovery.ledger_ceiling)
        self.governor = RateGovernor(config.discovery.min_interval_seconds, sleep=sleep)
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._handle: BrowserHandle | None = None

    # -- browser ------------------------------------------------------------

    def _login(self, handle: BrowserHandle) -> None:
        login(
            handle.page,
            get_x_credentials(),
            self.config.browser,
            screenshot_dir=self.screenshot_dir,
            sleep=self._sleep,
        )

    def _post_announcement(self, handle: BrowserHandle, text: str) -> bool:
        return post_status(handle.page, text, self.config.browser, self.screenshot_dir, sleep=self._sleep)

    def ensure_session(self) -> BrowserHandle:
        if self._handle is None:
            handle = self.browser_factory()
            try:
                if self.config.pipeline.require_login:
                    self.authenticate(handle)
            except Exception:
                handle.close()
                raise
            self._handle = handle
        return self._handle

    def discard_session(self) -> None:
        if self._handle is not None:
            log.info("Discarding browser session")
            self._handle.close()
            self._handle = None

    close = discard_session

    def _diagnose(self, name: str) -> None:
        if self._handle is not None and self.screenshot_dir is not None:
            save_screenshot(self._handle.session, self.screenshot_dir / name)

    # -- pipeline -----------------------------------------------------------

    def pick_list(self, folder: Folder) -> str:
        if not folder.lists:
            raise ListCuratorError(f"Folder {folder.name} has no lists")
        return self._rng.choice(folder.lists)

    def discover(self, handle: BrowserHandle, list_id: str) -> list[FeedItem]:
        dc = self.config.discovery
        extractor = ThreadExtractor(
            handle.session,
            self.config.selectors,
            retry_attempts=dc.extract_retry_attempts,
            retry_delay=dc.extract_retry_delay,
            max_thread_length=dc.max_thread_length,
            sleep=self._sleep,
        )
        return fetch_feed(
            handle.session,
            list_url(list_id),
            dc.options(),
            self.ledger,
            self.governor,
            extractor=extractor,
            sleep=self._sleep,
        )

    def _process(self, folder: Folder) -> FolderResult | None:
        handle = self.ensure_session()
        list_id = self.pick_list(folder)
        log.info("Processing folder %s (list %s)", folder.name, list_id)

        items = self.discover(handle, list_id)
        if not items:
            log.info("No new items for folder %s", folder.name)
            return None

        try:
            markdown = self.summarizer.generate_markdown(items)
            result = self.publisher.publish_markdown(folder.repo_path, markdown)
            if not result.success:
                raise PublishError(f"Failed to upload markdown: {result.message}", status=result.status)
        except ListCuratorError:
            # Unpublished items must be discoverable again on retry.
            self.ledger.discard(member_id for item in items for member_id in item.member_ids)
            raise

        announced = False
        if self.config.pipeline.announce:
            text = self.config.pipeline.announce_template.format(folder=folder.name, url=result.url)
            announced = self.announce(handle, text)

        return FolderResult(
            folder=folder.name,
            list_id=list_id,
            item_count=len(items),
            publish=result,
            announced=announced,
        )

    def run_folder(self, folder: Folder) -> FolderResult | None:
        """Run one folder with linear-backoff retries. Re-raises the last error when exhausted."""
        max_retries = self.config.pipeline.max_retries
        for attempt in range(max_retries + 1):
            try:
                return self._process(folder)
            except SessionError as e:
                log.error("Session failure for %s (attempt %d/%d): %s", folder.name, attempt + 1, max_retries + 1, e)
                self._diagnose("discovery-error.png")
                self.discard_session()
                if attempt >= max_retries:
                    raise
            except ListCuratorError as e:
                log.error("Pipeline error for %s (attempt %d/%d): %s", folder.name, attempt + 1, max_retries + 1, e)
                if attempt >= max_retries:
                    raise

            delay = self.config.pipeline.retry_delay_seconds * (attempt + 1)
            log.info("Retrying %s in %.0fs", folder.name, delay)
            self._sleep(delay)
        return None

    def run_all(self, folders: list[Folder] | None = None) -> list[FolderResult]:
        """Run every folder; one folder's failure never stops the others."""
        folders = folders if folders is not None else self.config.folders
        results: list[FolderResult] = []
        try:
            for folder in folders:
                try:
                    result = self.run_folder(folder)
                except Exception:
                    log.exception("Pipeline failed for folder %s, continuing", folder.name)
                    continue
                if result:
                    log.info("Published %d items for %s: %s", result.item_count, folder.name, result.publish.url)
                    results.append(result)

            gh = self.config.github
            self.publisher.update_readme(self.config.folders, readme_header(gh.readme_title, gh.readme_tagline))
            if self.screenshot_dir is not None:
                cleanup_screenshots(self.screenshot_dir)
        finally:
            self.close()
        return results
