"""Tests for the Playwright session adapter and error classification."""

import pytest
from fakes import FakeSession
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from listcurator.discovery import PlaywrightSession, Session, classify_playwright_error
from listcurator.errors import ElementReadError, NavigationError, ScrollError, SessionError, StaleElementError


class FakeHandle:
    def __init__(self, element):
        self._element = element
        self.disposed = False

    def as_element(self):
        return self._element

    def dispose(self):
        self.disposed = True


class FakeElement:
    def __init__(self, error=None, attrs=None, text="", parent=None):
        self.error = error
        self.attrs = attrs or {}
        self.text = text
        self.parent = parent

    def _check(self):
        if self.error:
            raise self.error

    def get_attribute(self, name):
        self._check()
        return self.attrs.get(name)

    def inner_text(self):
        self._check()
        return self.text

    def query_selector(self, selector):
        self._check()
        return None

    def query_selector_all(self, selector):
        self._check()
        return []

    def evaluate_handle(self, script, *args):
        self._check()
        self.last_handle = FakeHandle(self.parent)
        return self.last_handle


class FakePage:
    def __init__(self):
        self.goto_error = None
        self.evaluate_error = None
        self.wait_error = None
        self.visited = []
        self.height = 4200

    def goto(self, url, wait_until=None, timeout=None):
        if self.goto_error:
            raise self.goto_error
        self.visited.append((url, wait_until, timeout))

    def evaluate(self, script):
        if self.evaluate_error:
            raise self.evaluate_error
        return self.height if "scrollHeight" in script and "scrollTo" not in script else None

    def wait_for_selector(self, selector, timeout=None):
        if self.wait_error:
            raise self.wait_error

    def query_selector_all(self, selector):
        return ["a", "b"]

    def screenshot(self, full_page=False):
        return b"png"


def test_fake_session_satisfies_protocol():
    assert isinstance(FakeSession(), Session)
    assert isinstance(PlaywrightSession(FakePage()), Session)


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Element is not attached to the DOM", StaleElementError),
        ("Execution context was destroyed, most likely because of a navigation", StaleElementError),
        ("Target page, context or browser has been closed", SessionError),
        ("Unexpected value", ElementReadError),
    ],
)
def test_classify_playwright_error(message, expected):
    assert classify_playwright_error(PlaywrightError(message)) is expected


class TestPageOperations:
    def test_navigate_uses_domcontentloaded(self):
        page = FakePage()

        PlaywrightSession(page, navigation_timeout_seconds=30).navigate("https://x.com/i/lists/1")

        assert page.visited == [("https://x.com/i/lists/1", "domcontentloaded", 30_000)]

    def test_navigation_timeout(self):
        page = FakePage()
        page.goto_error = PlaywrightTimeoutError("Timeout 30000ms exceeded")

        with pytest.raises(NavigationError):
            PlaywrightSession(page).navigate("https://x.com")

    def test_scroll_failure(self):
        page = FakePage()
        page.evaluate_error = PlaywrightError("Target closed")
        session = PlaywrightSession(page)

        with pytest.raises(ScrollError):
            session.scroll_to_bottom()
        with pytest.raises(ScrollError):
            session.document_scroll_height()

    def test_scroll_height(self):
        assert PlaywrightSession(FakePage()).document_scroll_height() == 4200

    def test_wait_timeout_returns_false(self):
        page = FakePage()
        page.wait_error = PlaywrightTimeoutError("Timeout")

        assert PlaywrightSession(page).wait_for_item("article", 1) is False

    def test_wait_success(self):
        assert PlaywrightSession(FakePage()).wait_for_item("article", 1) is True


class TestElementOperations:
    def test_reads(self):
        session = PlaywrightSession(FakePage())
        parent = FakeElement()
        el = FakeElement(attrs={"href": "/a/status/1"}, text="hi", parent=parent)

        assert session.read_attribute(el, "href") == "/a/status/1"
        assert session.read_text(el) == "hi"
        assert session.find_ancestor(el, "div") is parent
        assert session.next_sibling(FakeElement()) is None

    def test_missing_relative_releases_handle(self):
        session = PlaywrightSession(FakePage())
        orphan = FakeElement()
        child = FakeElement(parent=FakeElement())

        assert session.next_sibling(orphan) is None
        assert orphan.last_handle.disposed
        assert session.find_ancestor(child, "div") is child.parent
        assert not child.last_handle.disposed

    def test_detached_element_is_stale(self):
        session = PlaywrightSession(FakePage())
        el = FakeElement(error=PlaywrightError("Element is not attached to the DOM"))

        with pytest.raises(StaleElementError):
            session.read_text(el)

    def test_other_element_failures_are_read_errors(self):
        session = PlaywrightSession(FakePage())
        el = FakeElement(error=PlaywrightError("Protocol error"))

        with pytest.raises(ElementReadError):
            session.read_attribute(el, "href")

    def test_closed_page_is_session_error(self):
        session = PlaywrightSession(FakePage())
        el = FakeElement(error=PlaywrightError("Target page, context or browser has been closed"))

        with pytest.raises(SessionError):
            session.find_descendants(el, "a")
