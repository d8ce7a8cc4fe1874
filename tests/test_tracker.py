"""Tests for the list tracker (monitor mode)."""

import pytest
from fakes import SELECTORS, FakeSession, make_post

from listcurator.errors import NavigationError
from listcurator.models import CuratorConfig
from listcurator.tracker import ListTracker


class FakeHandle:
    def __init__(self, session, started_at=0.0):
        self.session = session
        self.page = object()
        self.started_at = started_at
        self.closed = False

    def age_seconds(self, now=None):
        return (now or 0.0) - self.started_at

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FlakyNavigation(FakeSession):
    def __init__(self, *args, failures=0, **kwargs):
        super().__init__(*args, **kwargs)
        self.failures = failures

    def navigate(self, url):
        if self.failures > 0:
            self.failures -= 1
            raise NavigationError(f"Timeout loading {url}")
        super().navigate(url)


def make_config(**tracker):
    return CuratorConfig.from_dict(
        {
            "discovery": {
                "scroll_pause_seconds": 0,
                "initial_wait_seconds": 0,
                "max_consecutive_no_new_content": 1,
            },
            "selectors": SELECTORS.model_dump(),
            "tracker": {
                "check_interval_seconds": 60,
                "navigation_retry_seconds": 5,
                "refresh_after_failures": 3,
                "recover_after_failures": 2,
                **tracker,
            },
        }
    )


class Harness:
    def __init__(self, session=None, config=None, notify_ok=True):
        self.session = session or FakeSession([make_post("1", text="old post")])
        self.clock = FakeClock()
        self.sleeps = []
        self.sent = []
        self.handles = []
        self.notify_ok = notify_ok
        self.tracker = ListTracker(
            config or make_config(),
            "999",
            browser_factory=self.factory,
            authenticate=lambda handle: None,
            notify=self.notify,
            clock=self.clock,
            sleep=self.sleep,
        )

    def factory(self):
        handle = FakeHandle(self.session, started_at=self.clock.now)
        self.handles.append(handle)
        return handle

    def notify(self, item):
        self.sent.append(item.id)
        return self.notify_ok

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.clock.now += seconds

    def publish(self, post_id, text="fresh news", author=None):
        self.session.root.add(make_post(post_id, author=author or f"user{post_id}", text=text))


def test_baseline_does_not_notify():
    h = Harness()

    assert h.tracker.baseline() == 1
    assert h.sent == []
    assert h.session.navigations == ["https://x.com/i/lists/999"]


def test_only_new_posts_are_notified():
    h = Harness()
    h.tracker.baseline()
    h.publish("2")

    sent = h.tracker.check_once()

    assert [item.id for item in sent] == ["2"]
    assert h.sent == ["2"]
    assert h.tracker.check_once() == []


def test_keyword_filter():
    h = Harness(config=make_config(keywords=["agents"]))
    h.tracker.baseline()
    h.publish("2", text="New AGENTS framework released")
    h.publish("3", text="Lunch photos")

    sent = h.tracker.check_once()

    assert [item.id for item in sent] == ["2"]


def test_failed_delivery_is_not_counted():
    h = Harness(notify_ok=False)
    h.tracker.baseline()
    h.publish("2")

    assert h.tracker.check_once() == []
    assert h.sent == ["2"]
    assert h.tracker.notified == 0


def test_navigation_is_retried():
    h = Harness(session=FlakyNavigation([make_post("1", text="x")], failures=2))

    h.tracker.baseline()

    assert h.sleeps == [5, 5]
    assert len(h.session.navigations) == 1


def test_navigation_gives_up():
    h = Harness(session=FlakyNavigation([], failures=5))

    with pytest.raises(NavigationError):
        h.tracker.baseline()

    assert h.sleeps == [5, 5]


class TestRefresh:
    def test_no_refresh_without_browser(self):
        assert not Harness().tracker.should_refresh()

    def test_old_browser_is_refreshed(self):
        h = Harness(config=make_config(browser_max_age_seconds=100, max_idle_seconds=10_000))
        h.tracker.ensure_session()
        h.clock.now = 101

        assert h.tracker.should_refresh()

    def test_repeated_failures_trigger_refresh(self):
        h = Harness()
        h.tracker.ensure_session()
        h.tracker.consecutive_failures = 3

        assert h.tracker.should_refresh()

    def test_idle_session_is_refreshed(self):
        h = Harness(config=make_config(max_idle_seconds=30, browser_max_age_seconds=10_000))
        h.tracker.ensure_session()
        h.clock.now = 31

        assert h.tracker.should_refresh()

    def test_refresh_replaces_handle(self):
        h = Harness()
        h.tracker.ensure_session()
        h.tracker.consecutive_failures = 4

        h.tracker.refresh_browser()

        assert len(h.handles) == 2
        assert h.handles[0].closed
        assert h.tracker.consecutive_failures == 0


class TestRun:
    def test_runs_bounded_checks(self):
        h = Harness()

        h.tracker.run(max_checks=2)

        assert h.tracker.checks == 2
        # one interval between the two checks, none after the last
        assert h.sleeps == [60]
        assert h.handles[0].closed

    def test_notifies_during_run(self):
        h = Harness()
        original_sleep = h.sleep

        def publish_between_checks(seconds):
            original_sleep(seconds)
            h.publish("2")

        h.tracker._sleep = publish_between_checks
        h.tracker.run(max_checks=2)

        assert h.sent == ["2"]

    def test_stop_ends_the_loop(self):
        h = Harness()

        def stop_on_sleep(seconds):
            h.tracker.stop()

        h.tracker._sleep = stop_on_sleep
        h.tracker.run()

        assert h.tracker.checks == 1
        assert h.tracker.stopped

    def test_failures_trigger_recovery(self):
        h = Harness(config=make_config(navigation_attempts=1))
        original_sleep = h.sleep

        def break_navigation(seconds):
            original_sleep(seconds)
            h.session.fail_navigation = True

        h.tracker._sleep = break_navigation
        h.tracker.run(max_checks=4)

        # checks 2 and 3 fail, which recycles the browser; check 4 fails again
        assert len(h.handles) == 2
        assert h.handles[0].closed
        assert h.tracker.consecutive_failures == 1
