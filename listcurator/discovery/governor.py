"""Minimum-spacing gate for feed fetches and LLM calls."""

import threading
import time
from collections.abc import Callable


class RateGovernor:
    """Block callers until ``min_interval_seconds`` has passed since the last acquire.

    The first ``acquire()`` never waits. A non-positive interval disables
    waiting entirely. Calls are serialized so concurrent fetchers share one
    spacing window.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_fire: float | None = None

    @classmethod
    def per_minute(cls, requests_per_minute: int, **kwargs) -> "RateGovernor":
        if requests_per_minute <= 0:
            return cls(0.0, **kwargs)
        return cls(60.0 / requests_per_minute, **kwargs)

    def acquire(self) -> float:
        """Wait for the next slot; return the seconds spent waiting."""
        with self._lock:
            waited = 0.0
            if self.min_interval_seconds and self.min_interval_seconds > 0 and self._last_fire is not None:
                wait_for = self.min_interval_seconds - (self._clock() - self._last_fire)
                if wait_for > 0:
                    self._sleep(wait_for)
                    waited = wait_for
            self._last_fire = self._clock()
            return waited
