"""Credential login for the X web UI."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..auth import XCredentials
from ..errors import LoginError
from ..models.config import BrowserConfig

log = logging.getLogger(__name__)

HOME_URL = "https://x.com/home"
LOGIN_URL = "https://x.com/i/flow/login"

HOME_MARKER = '[data-testid="AppTabBar_Home_Link"]'
USERNAME_INPUT = 'input[autocomplete="username"]'
VERIFICATION_INPUTS = (
    'input[data-testid="ocfEnterTextTextInput"]',
    'input[name="text"]',
    'input[type="email"]',
)
PASSWORD_INPUT = 'input[name="password"]'


def is_logged_in(page: Page, timeout_seconds: float = 5.0) -> bool:
    """True when the home tab marker renders on the home timeline."""
    try:
        page.goto(HOME_URL, wait_until="domcontentloaded")
        page.wait_for_selector(HOME_MARKER, timeout=timeout_seconds * 1000)
        return True
    except PlaywrightTimeoutError:
        return False
    except PlaywrightError as e:
        log.debug("Session check failed: %s", e)
        return False


def _screenshot(page: Page, path: Path | None) -> None:
    if path is None:
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        page.screenshot(path=str(path), full_page=True)
        log.info("Saved login screenshot to %s", path)
    except (PlaywrightError, OSError) as e:
        log.warning("Could not save login screenshot: %s", e)


def _first_visible(page: Page, selectors: tuple[str, ...]):
    for selector in selectors:
        element = page.query_selector(selector)
        if element is not None and element.is_visible():
            return element
    return None


def login(
    page: Page,
    credentials: XCredentials,
    config: BrowserConfig | None = None,
    screenshot_dir: Path | None = None,
    storage_state_path: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Log in unless the page already carries a valid session.

    Raises ``LoginError`` (after saving ``login-error.png``) when the flow
    cannot be completed.
    """
    config = config or BrowserConfig()
    delay = config.typing_delay_ms

    if is_logged_in(page):
        log.info("Already logged in")
        return

    log.info("Starting login flow for @%s", credentials.username)
    try:
        page.goto(LOGIN_URL, wait_until="domcontentloaded")
        page.wait_for_selector(USERNAME_INPUT, state="visible")
        sleep(2)
        page.locator(USERNAME_INPUT).press_sequentially(credentials.username, delay=delay)
        page.keyboard.press("Enter")
        sleep(3)

        verification = _first_visible(page, VERIFICATION_INPUTS)
        if verification is not None:
            log.info("Email verification requested")
            if not credentials.email:
                raise LoginError("Email verification required but X_EMAIL is not set")
            verification.press_sequentially(credentials.email, delay=delay)
            page.keyboard.press("Enter")
            sleep(5)

        try:
            page.wait_for_selector(PASSWORD_INPUT, state="visible", timeout=30_000)
        except PlaywrightTimeoutError as e:
            _screenshot(page, screenshot_dir / "password-not-found.png" if screenshot_dir else None)
            raise LoginError("Could not find password field") from e

        sleep(1)
        page.locator(PASSWORD_INPUT).press_sequentially(credentials.password, delay=delay)
        page.keyboard.press("Enter")
        sleep(5)

        if page.query_selector(PASSWORD_INPUT) is not None:
            raise LoginError("Login failed: password field still present")
        if "/home" not in page.url and page.query_selector(HOME_MARKER) is None:
            raise LoginError(f"Login did not reach the home timeline (at {page.url})")
    except (LoginError, PlaywrightError) as e:
        log.error("Login failed: %s", e)
        _screenshot(page, screenshot_dir / "login-error.png" if screenshot_dir else None)
        if isinstance(e, LoginError):
            raise
        raise LoginError(f"Login failed: {e}") from e

    log.info("Login successful")
    if storage_state_path is not None:
        try:
            storage_state_path.parent.mkdir(parents=True, exist_ok=True)
            page.context.storage_state(path=str(storage_state_path))
        except (PlaywrightError, OSError) as e:
            log.warning("Could not save login state: %s", e)
