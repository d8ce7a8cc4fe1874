"""Publish a status update through the X composer."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

from ..models.config import BrowserConfig

log = logging.getLogger(__name__)

COMPOSE_URL = "https://x.com/compose/post"
FALLBACK_URL = "https://x.com/home"
COMPOSER = 'div[data-testid="tweetTextarea_0"]'
SUBMIT_BUTTON = '[data-testid="tweetButton"]'
TOAST = '[data-testid="toast"]'


def _post_landed(page: Page) -> bool:
    return bool(
        page.evaluate(
            """([composer, toast]) => {
                const composerGone = !document.querySelector(composer);
                const toastShown = !!document.querySelector(toast);
                const noErrors = !document.querySelector('[data-testid*="error"]');
                return (composerGone || toastShown) && noErrors;
            }""",
            [COMPOSER, TOAST],
        )
    )


def post_status(
    page: Page,
    text: str,
    config: BrowserConfig | None = None,
    screenshot_dir: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Type ``text`` into the composer and submit it. Returns ``True`` when the post landed."""
    config = config or BrowserConfig()
    try:
        try:
            page.goto(COMPOSE_URL, wait_until="domcontentloaded")
        except PlaywrightError:
            page.goto(FALLBACK_URL, wait_until="domcontentloaded")
        sleep(3)

        page.wait_for_selector(COMPOSER, timeout=10_000)
        page.click(COMPOSER)
        sleep(1)
        page.keyboard.type(text, delay=config.typing_delay_ms)
        sleep(1)

        page.keyboard.press("Control+Enter")
        sleep(2)
        if page.query_selector(SUBMIT_BUTTON) is not None and not _post_landed(page):
            page.click(SUBMIT_BUTTON)
        sleep(3)

        if _post_landed(page):
            log.info("Status posted")
            return True
        log.error("Status post could not be verified")
    except PlaywrightError as e:
        log.error("Failed to post status: %s", e)

    if screenshot_dir is not None:
        try:
            screenshot_dir.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(screenshot_dir / "post-failed.png"))
        except (PlaywrightError, OSError) as e:
            log.warning("Could not save post screenshot: %s", e)
    return False
