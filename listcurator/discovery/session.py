"""Session handle: the browser operations discovery needs, plus a Playwright adapter."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..errors import ElementReadError, NavigationError, ScrollError, SessionError, StaleElementError

log = logging.getLogger(__name__)

# Element handles are opaque to discovery code; only the session interprets them.
Element = Any

_STALE_MARKERS = (
    "not attached",
    "detached",
    "is disposed",
    "execution context was destroyed",
    "cannot find context",
    "node is not",
)
_CLOSED_MARKERS = (
    "target closed",
    "has been closed",
    "browser has disconnected",
    "connection closed",
)


@runtime_checkable
class Session(Protocol):
    """Operations the discovery engine issues against one browser page."""

    def navigate(self, url: str) -> None: ...

    def scroll_to_bottom(self) -> None: ...

    def query_visible_items(self, selector: str) -> list[Element]: ...

    def read_attribute(self, element: Element, name: str) -> str | None: ...

    def read_text(self, element: Element) -> str: ...

    def find_descendant(self, element: Element, selector: str) -> Element | None: ...

    def find_descendants(self, element: Element, selector: str) -> list[Element]: ...

    def find_ancestor(self, element: Element, selector: str) -> Element | None: ...

    def next_sibling(self, element: Element) -> Element | None: ...

    def document_scroll_height(self) -> int: ...

    def take_screenshot(self) -> bytes: ...

    def wait_for_item(self, selector: str, timeout_seconds: float) -> bool: ...


def classify_playwright_error(exc: Exception) -> type[Exception]:
    """Map a Playwright error raised during an element read onto the error hierarchy."""
    msg = str(exc).lower()
    if any(marker in msg for marker in _CLOSED_MARKERS):
        return SessionError
    if any(marker in msg for marker in _STALE_MARKERS):
        return StaleElementError
    return ElementReadError


class PlaywrightSession:
    """``Session`` backed by a ``playwright.sync_api.Page``."""

    def __init__(self, page: Page, navigation_timeout_seconds: float = 60.0):
        self.page = page
        self.navigation_timeout_seconds = navigation_timeout_seconds

    # -- page level ---------------------------------------------------------

    def navigate(self, url: str) -> None:
        try:
            self.page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.navigation_timeout_seconds * 1000,
            )
        except PlaywrightTimeoutError as e:
            raise NavigationError(f"Timed out loading {url}") from e
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}") from e

    def scroll_to_bottom(self) -> None:
        try:
            self.page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        except PlaywrightError as e:
            raise ScrollError(f"Scroll failed: {e}") from e

    def document_scroll_height(self) -> int:
        try:
            return int(self.page.evaluate("document.body.scrollHeight") or 0)
        except PlaywrightError as e:
            raise ScrollError(f"Could not read scroll height: {e}") from e

    def query_visible_items(self, selector: str) -> list[Element]:
        try:
            return self.page.query_selector_all(selector)
        except PlaywrightError as e:
            raise SessionError(f"Item query failed: {e}") from e

    def wait_for_item(self, selector: str, timeout_seconds: float) -> bool:
        try:
            self.page.wait_for_selector(selector, timeout=timeout_seconds * 1000)
            return True
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            raise SessionError(f"Waiting for {selector} failed: {e}") from e

    def take_screenshot(self) -> bytes:
        try:
            return self.page.screenshot(full_page=True)
        except PlaywrightError as e:
            raise SessionError(f"Screenshot failed: {e}") from e

    # -- element level ------------------------------------------------------

    def _element_call(self, fn, *args):
        try:
            return fn(*args)
        except PlaywrightError as e:
            raise classify_playwright_error(e)(str(e)) from e

    def read_attribute(self, element: Element, name: str) -> str | None:
        return self._element_call(element.get_attribute, name)

    def read_text(self, element: Element) -> str:
        return self._element_call(element.inner_text) or ""

    def find_descendant(self, element: Element, selector: str) -> Element | None:
        return self._element_call(element.query_selector, selector)

    def find_descendants(self, element: Element, selector: str) -> list[Element]:
        return self._element_call(element.query_selector_all, selector)

    def _handle_element(self, handle) -> Element | None:
        found = handle.as_element()
        if found is None:
            # A null JSHandle stays alive on the page until released.
            self._element_call(handle.dispose)
        return found

    def find_ancestor(self, element: Element, selector: str) -> Element | None:
        handle = self._element_call(element.evaluate_handle, "(el, sel) => el.closest(sel)", selector)
        return self._handle_element(handle)

    def next_sibling(self, element: Element) -> Element | None:
        handle = self._element_call(element.evaluate_handle, "el => el.nextElementSibling")
        return self._handle_element(handle)
