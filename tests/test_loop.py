"""Tests for the scroll-discovery loop."""

import pytest
from fakes import SELECTORS, FakeSession, make_post

from listcurator.discovery import (
    DedupLedger,
    DiscoveryLoop,
    DiscoveryState,
    RateGovernor,
    TerminationReason,
    ThreadExtractor,
    discover_content,
    fetch_feed,
    is_acceptable,
    is_promotional,
)
from listcurator.errors import NavigationError, ScrollError, SessionError
from listcurator.models import DiscoveryOptions, FeedItem, Segment


def words(n: int, prefix: str = "word") -> str:
    return " ".join(f"{prefix}{i}" for i in range(n))


def options(**overrides) -> DiscoveryOptions:
    base = {
        "target_count": 15,
        "max_scroll_attempts": 10,
        "scroll_pause_seconds": 0,
        "max_consecutive_no_new_content": 3,
        "min_acceptance_signal": 15,
        "initial_wait_seconds": 0,
    }
    base.update(overrides)
    return DiscoveryOptions(**base)


def no_sleep(_seconds):
    return None


def run_loop(session, opts, ledger=None, extractor=None):
    extractor = extractor or ThreadExtractor(session, SELECTORS, sleep=no_sleep)
    loop = DiscoveryLoop(session, opts, ledger, extractor=extractor, sleep=no_sleep)
    return loop, loop.run()


class TestAcceptance:
    def _item(self, text="", images=(), links=()):
        return FeedItem(id="1", url="u", segments=(Segment(text=text, images=images, links=links),))

    def test_enough_words(self):
        assert is_acceptable(self._item(words(15)), 15)

    def test_too_few_words(self):
        assert not is_acceptable(self._item(words(14)), 15)

    def test_media_overrides_word_count(self):
        assert is_acceptable(self._item("wow", images=("https://pbs.twimg.com/a.jpg",)), 15)

    def test_outbound_link_overrides_word_count(self):
        assert is_acceptable(self._item("", links=("https://github.com/a/b",)), 15)

    def test_empty_item_never_acceptable(self):
        assert not is_acceptable(self._item(""), 0)

    def test_thread_words_are_aggregated(self):
        item = FeedItem(
            id="1",
            url="u",
            segments=(Segment(text=words(8, "a")), Segment(text=words(8, "b"))),
        )
        assert is_acceptable(item, 15)


class TestPromotional:
    def _item(self, text):
        return FeedItem(id="1", url="u", segments=(Segment(text=text),))

    def test_engagement_bait(self):
        assert is_promotional(self._item(f"RT if you agree {words(30)}"), options())
        assert is_promotional(self._item(f"{words(20)} Follow me for more"), options())

    def test_short_giveaway(self):
        assert is_promotional(self._item("Huge giveaway this week, reply to enter"), options())

    def test_long_contest_post_is_kept(self):
        text = f"The results of the Kaggle contest are in. {words(30)}"

        assert len(text) >= 120
        assert not is_promotional(self._item(text), options())

    def test_phrases_are_configurable(self):
        opts = options(reject_phrases=[], reject_short_phrases=[])

        assert not is_promotional(self._item("RT if you agree"), opts)

    def test_loop_skips_promotional_posts(self):
        cells = [
            make_post("1", author="spammer", text=f"Follow me and RT if you want more {words(20)}"),
            make_post("2", author="writer", text=words(20)),
        ]
        ledger = DedupLedger()

        _, results = run_loop(FakeSession(cells), options(max_scroll_attempts=1), ledger)

        assert [item.id for item in results] == ["2"]
        assert "1" not in ledger


class TestTermination:
    def test_target_reached(self):
        cells = [make_post(str(i), author=f"user{i}", text=words(20)) for i in range(1, 6)]
        session = FakeSession(cells)

        loop, results = run_loop(session, options(target_count=2))

        assert len(results) == 2
        assert loop.termination is TerminationReason.TARGET_REACHED
        assert loop.scroll_attempts == 1
        assert loop.state is DiscoveryState.TERMINATED

    def test_stalls_when_nothing_changes(self):
        session = FakeSession([make_post("1", text=words(20))], fixed_height=5000)

        loop, results = run_loop(session, options(max_consecutive_no_new_content=3))

        assert [item.id for item in results] == ["1"]
        assert loop.termination is TerminationReason.STALLED
        # one accepting pass, then three passes with nothing new
        assert loop.scroll_attempts == 4

    def test_max_scroll_attempts(self):
        batches = [[make_post(str(i), author=f"user{i}", text=words(20))] for i in range(1, 10)]
        session = FakeSession(batches=batches)

        loop, results = run_loop(session, options(max_scroll_attempts=3, target_count=100))

        assert len(results) == 3
        assert loop.termination is TerminationReason.MAX_SCROLL_ATTEMPTS
        assert session.scrolls == 3

    def test_new_but_rejected_items_do_not_stall(self):
        batches = [[make_post(str(i), author=f"user{i}", text="too short")] for i in range(1, 10)]
        session = FakeSession(batches=batches)

        loop, results = run_loop(session, options(max_scroll_attempts=5, max_consecutive_no_new_content=2))

        assert results == []
        assert loop.termination is TerminationReason.MAX_SCROLL_ATTEMPTS
        assert loop.stall_count == 0

    def test_unchanged_height_counts_as_stall(self):
        batches = [[make_post(str(i), author=f"user{i}", text="short")] for i in range(1, 10)]
        session = FakeSession(batches=batches, fixed_height=3000)

        loop, _ = run_loop(session, options(max_scroll_attempts=50, max_consecutive_no_new_content=2))

        assert loop.termination is TerminationReason.STALLED
        assert loop.scroll_attempts == 2

    def test_stalled_takes_precedence_over_max_scrolls(self):
        session = FakeSession([], fixed_height=1000)

        loop, _ = run_loop(session, options(max_scroll_attempts=2, max_consecutive_no_new_content=2))

        assert loop.termination is TerminationReason.STALLED


class TestDedup:
    def test_second_call_emits_nothing_new(self):
        cells = [make_post(str(i), author=f"user{i}", text=words(20)) for i in range(1, 4)]
        session = FakeSession(cells)
        ledger = DedupLedger()

        _, first = run_loop(session, options(), ledger=ledger)
        _, second = run_loop(session, options(), ledger=ledger)

        assert [i.id for i in first] == ["1", "2", "3"]
        assert second == []

    def test_no_duplicates_within_a_call(self):
        session = FakeSession([make_post("1", text=words(20))])

        _, results = run_loop(session, options(max_consecutive_no_new_content=5))

        assert [i.id for i in results] == ["1"]

    def test_rejected_items_are_not_recorded(self):
        session = FakeSession([make_post("1", text="two words")])
        ledger = DedupLedger()

        run_loop(session, options(), ledger=ledger)

        assert not ledger.has("1")

    def test_one_word_with_image_is_accepted(self):
        session = FakeSession([make_post("1", text="wow", images=("https://pbs.twimg.com/a.jpg",))])

        _, results = run_loop(session, options())

        assert [i.id for i in results] == ["1"]

    def test_thread_members_are_not_emitted_again(self):
        cells = [
            make_post("1", author="alice", text=words(6, "a")),
            make_post("2", author="alice", text=words(6, "b")),
            make_post("3", author="alice", text=words(6, "c")),
            make_post("4", author="bob", text=words(20, "d")),
        ]
        session = FakeSession(cells)
        ledger = DedupLedger()

        _, results = run_loop(session, options(), ledger=ledger)

        assert [i.id for i in results] == ["1", "4"]
        assert len(results[0].segments) == 3
        assert all(ledger.has(i) for i in ("1", "2", "3", "4"))

    def test_lazy_loaded_items_are_collected(self):
        session = FakeSession(
            [make_post("1", text=words(20))],
            batches=[[make_post("2", author="bob", text=words(20))]],
        )

        _, results = run_loop(session, options())

        assert [i.id for i in results] == ["1", "2"]


class TestErrors:
    def test_wait_timeout_is_not_fatal(self):
        session = FakeSession([make_post("1", text=words(20))])
        session.wait_result = False

        _, results = run_loop(session, options())

        assert [i.id for i in results] == ["1"]

    def test_empty_page_returns_empty_list(self):
        session = FakeSession([])

        loop, results = run_loop(session, options())

        assert results == []
        assert loop.termination is TerminationReason.STALLED

    def test_scroll_failure_propagates(self):
        session = FakeSession([make_post("1", text=words(20))])
        session.fail_scroll = True

        with pytest.raises(ScrollError):
            run_loop(session, options())

    def test_item_errors_are_skipped(self):
        cells = [make_post("1", text=words(20)), make_post("2", author="bob", text=words(20))]
        session = FakeSession(cells)

        class FlakyExtractor(ThreadExtractor):
            def extract(self, item):
                result = super().extract(item)
                if result is not None and result.id == "1":
                    raise RuntimeError("unexpected DOM shape")
                return result

        extractor = FlakyExtractor(session, SELECTORS, sleep=no_sleep)
        _, results = run_loop(session, options(max_consecutive_no_new_content=1), extractor=extractor)

        assert [i.id for i in results] == ["2"]

    def test_session_errors_abort_the_call(self):
        session = FakeSession([make_post("1", text=words(20))])

        class DeadExtractor(ThreadExtractor):
            def extract(self, item):
                raise SessionError("Target page, context or browser has been closed")

        with pytest.raises(SessionError):
            run_loop(session, options(), extractor=DeadExtractor(session, SELECTORS, sleep=no_sleep))

    def test_scroll_pause_uses_sleep(self, sleeps):
        session = FakeSession([make_post("1", text=words(20))])
        extractor = ThreadExtractor(session, SELECTORS, sleep=sleeps)

        opts = options(scroll_pause_seconds=2.5, max_scroll_attempts=2)
        discover_content(session, opts, sleep=sleeps, extractor=extractor)

        assert sleeps.calls == [2.5, 2.5]


class TestFetchFeed:
    def test_navigates_then_discovers(self):
        session = FakeSession([make_post("1", text=words(20))])
        extractor = ThreadExtractor(session, SELECTORS, sleep=no_sleep)

        results = fetch_feed(
            session,
            "https://x.com/i/lists/123",
            options(),
            extractor=extractor,
            sleep=no_sleep,
        )

        assert session.navigations == ["https://x.com/i/lists/123"]
        assert [i.id for i in results] == ["1"]

    def test_governor_is_acquired_first(self):
        session = FakeSession([make_post("1", text=words(20))])
        acquired = []

        class RecordingGovernor(RateGovernor):
            def acquire(self):
                acquired.append(list(session.navigations))
                return super().acquire()

        fetch_feed(
            session,
            "https://x.com/i/lists/1",
            options(),
            governor=RecordingGovernor(0),
            extractor=ThreadExtractor(session, SELECTORS, sleep=no_sleep),
            sleep=no_sleep,
        )

        assert acquired == [[]]

    def test_ledger_is_compacted(self):
        cells = [make_post(str(i), author=f"user{i}", text=words(20)) for i in range(1, 6)]
        session = FakeSession(cells)
        ledger = DedupLedger(ceiling=2)

        results = fetch_feed(
            session,
            "https://x.com/i/lists/1",
            options(),
            ledger=ledger,
            extractor=ThreadExtractor(session, SELECTORS, sleep=no_sleep),
            sleep=no_sleep,
        )

        assert len(results) == 5
        assert len(ledger) <= 2
        assert ledger.has("5")

    def test_navigation_failure_propagates(self):
        session = FakeSession([make_post("1", text=words(20))])
        session.fail_navigation = True

        with pytest.raises(NavigationError):
            fetch_feed(session, "https://x.com/i/lists/1", options(), sleep=no_sleep)

        assert session.queries == 0
