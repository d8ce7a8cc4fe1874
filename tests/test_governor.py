"""Tests for the rate governor."""

import threading

from listcurator.discovery import RateGovernor


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def test_first_acquire_never_waits():
    clock = FakeClock()
    governor = RateGovernor(5.0, clock=clock, sleep=clock.sleep)

    assert governor.acquire() == 0.0
    assert clock.now == 100.0


def test_back_to_back_acquires_are_spaced():
    clock = FakeClock()
    governor = RateGovernor(5.0, clock=clock, sleep=clock.sleep)

    governor.acquire()
    clock.now += 2.0
    waited = governor.acquire()

    assert waited == 3.0
    assert clock.now == 105.0


def test_no_wait_once_interval_has_passed():
    clock = FakeClock()
    governor = RateGovernor(5.0, clock=clock, sleep=clock.sleep)

    governor.acquire()
    clock.now += 7.5

    assert governor.acquire() == 0.0


def test_non_positive_interval_disables_waiting():
    slept = []
    governor = RateGovernor(0, sleep=slept.append)

    for _ in range(5):
        governor.acquire()

    assert slept == []


def test_per_minute_sizing():
    assert RateGovernor.per_minute(60).min_interval_seconds == 1.0
    assert RateGovernor.per_minute(0).min_interval_seconds == 0.0


def test_concurrent_acquires_are_serialized():
    clock = FakeClock()
    lock = threading.Lock()

    def sleep(seconds):
        with lock:
            clock.now += seconds

    governor = RateGovernor(1.0, clock=clock, sleep=sleep)
    fires = []

    def worker():
        governor.acquire()
        fires.append(clock.now)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Four acquires with a 1s spacing need at least 3s of simulated time
    assert clock.now >= 103.0
