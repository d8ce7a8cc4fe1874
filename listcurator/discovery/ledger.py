"""Bounded, insertion-ordered set of already-accepted item ids."""

import logging
import math
from collections.abc import Iterator

log = logging.getLogger(__name__)

DEFAULT_LEDGER_CEILING = 10_000


class DedupLedger:
    """Insertion-ordered id set with half-compaction once it outgrows ``ceiling``.

    Nothing is persisted. A restart starts from an empty ledger, so recently
    seen items can be emitted once more after a restart.
    """

    def __init__(self, ceiling: int = DEFAULT_LEDGER_CEILING):
        if ceiling < 1:
            raise ValueError("ledger ceiling must be >= 1")
        self.ceiling = ceiling
        self._ids: dict[str, None] = {}

    def has(self, item_id: str) -> bool:
        return item_id in self._ids

    def add(self, item_id: str) -> None:
        # Re-adding keeps the original position.
        if item_id not in self._ids:
            self._ids[item_id] = None

    def update(self, item_ids) -> None:
        for item_id in item_ids:
            self.add(item_id)

    def discard(self, item_ids) -> None:
        """Forget ids, e.g. a batch whose downstream processing failed."""
        for item_id in item_ids:
            self._ids.pop(item_id, None)

    def compact_if_oversized(self) -> int:
        """Drop the oldest half when above ceiling. Returns how many ids were dropped."""
        size = len(self._ids)
        if size <= self.ceiling:
            return 0

        keep = math.ceil(size / 2)
        # ceil(n/2) can still exceed a small ceiling when n is far above it
        keep = min(keep, self.ceiling)
        recent = list(self._ids)[size - keep :]
        self._ids = dict.fromkeys(recent)
        dropped = size - keep
        log.info("Compacted dedup ledger: dropped %d ids, kept %d", dropped, keep)
        return dropped

    def reset(self) -> None:
        self._ids.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __repr__(self) -> str:
        return f"DedupLedger(size={len(self._ids)}, ceiling={self.ceiling})"
