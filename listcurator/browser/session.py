"""Browser lifecycle: launch or attach to Chromium and hand out sessions."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..discovery.session import PlaywrightSession, Session
from ..errors import ListCuratorError, SessionError
from ..models.config import BrowserConfig

log = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font"})

# Files written by login/post/discovery failures; removed after a clean run.
DIAGNOSTIC_SCREENSHOTS = (
    "login-error.png",
    "post-failed.png",
    "discovery-error.png",
    "password-not-found.png",
)


@dataclass
class BrowserHandle:
    """A live page plus what is needed to shut it down again."""

    page: Any
    context: Any
    session: Session
    started_at: float = field(default_factory=time.monotonic)
    _browser: Any = None
    _playwright: Any = None
    _attached: bool = False

    def age_seconds(self, now: float | None = None) -> float:
        return (time.monotonic() if now is None else now) - self.started_at

    def close(self) -> None:
        try:
            if self._attached:
                # Leave a user-owned Chrome running; only drop our tab.
                self.page.close()
            else:
                self.context.close()
                if self._browser is not None:
                    self._browser.close()
        except PlaywrightError as e:
            log.debug("Ignoring error while closing browser: %s", e)
        finally:
            if self._playwright is not None:
                self._playwright.stop()


def _block_heavy_resources(route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


def launch_browser(config: BrowserConfig | None = None) -> BrowserHandle:
    """Start Playwright and return a ready page.

    With ``cdp_url`` set, attach to an already running Chrome started with
    ``--remote-debugging-port``; otherwise launch a fresh Chromium.
    """
    config = config or BrowserConfig()
    pw = sync_playwright().start()
    try:
        attached = bool(config.cdp_url)
        if attached:
            log.info("Connecting to Chrome at %s", config.cdp_url)
            browser = pw.chromium.connect_over_cdp(config.cdp_url)
            context = browser.contexts[0] if browser.contexts else browser.new_context()
        else:
            browser = pw.chromium.launch(headless=config.headless)
            context_kwargs: dict[str, Any] = {}
            if config.storage_state and Path(config.storage_state).exists():
                context_kwargs["storage_state"] = config.storage_state
            context = browser.new_context(**context_kwargs)

        if config.block_resources:
            context.route("**/*", _block_heavy_resources)

        page = context.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout_seconds * 1000)
        page.set_default_timeout(config.default_timeout_seconds * 1000)
    except PlaywrightError as e:
        pw.stop()
        raise SessionError(f"Could not start browser: {e}") from e

    return BrowserHandle(
        page=page,
        context=context,
        session=PlaywrightSession(page, config.navigation_timeout_seconds),
        _browser=browser,
        _playwright=pw,
        _attached=attached,
    )


@contextmanager
def open_browser(config: BrowserConfig | None = None) -> Iterator[BrowserHandle]:
    handle = launch_browser(config)
    try:
        yield handle
    finally:
        handle.close()


def save_screenshot(session: Session, path: Path) -> Path | None:
    """Best-effort diagnostic screenshot. Returns the path written, or ``None``."""
    try:
        data = session.take_screenshot()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except (ListCuratorError, OSError) as e:
        log.warning("Could not save screenshot %s: %s", path.name, e)
        return None
    log.info("Saved diagnostic screenshot to %s", path)
    return path


def cleanup_screenshots(directory: Path) -> list[Path]:
    """Delete known diagnostic screenshots from ``directory``."""
    removed = []
    for name in DIAGNOSTIC_SCREENSHOTS:
        path = directory / name
        try:
            if path.exists():
                path.unlink()
                removed.append(path)
                log.info("Cleaned up screenshot: %s", path)
        except OSError as e:
            log.warning("Failed to remove %s: %s", path, e)
    return removed
