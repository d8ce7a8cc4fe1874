"""Bounded retry combinator for transient failures."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on(
    fn: Callable[[], T],
    exceptions: type[BaseException] | tuple[type[BaseException], ...],
    attempts: int = 3,
    delay: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` up to ``attempts`` times, sleeping ``delay`` between tries.

    Only ``exceptions`` trigger a retry; anything else propagates at once.
    The last transient failure is re-raised when attempts run out.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except exceptions as exc:
            if attempt >= attempts:
                raise
            log.debug("Transient failure (attempt %d/%d): %s", attempt, attempts, exc)
            if delay > 0:
                sleep(delay)

    raise AssertionError("unreachable")
