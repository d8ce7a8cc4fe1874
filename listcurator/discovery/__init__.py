"""Content discovery and deduplication engine."""

from .extractor import QUOTE_MARKER, ThreadExtractor, optional_read
from .governor import RateGovernor
from .ledger import DEFAULT_LEDGER_CEILING, DedupLedger
from .loop import (
    DiscoveryLoop,
    DiscoveryState,
    TerminationReason,
    discover_content,
    fetch_feed,
    is_acceptable,
    is_promotional,
)
from .retry import retry_on
from .session import PlaywrightSession, Session, classify_playwright_error

__all__ = [
    "DEFAULT_LEDGER_CEILING",
    "QUOTE_MARKER",
    "DedupLedger",
    "DiscoveryLoop",
    "DiscoveryState",
    "PlaywrightSession",
    "RateGovernor",
    "Session",
    "TerminationReason",
    "ThreadExtractor",
    "classify_playwright_error",
    "discover_content",
    "fetch_feed",
    "is_acceptable",
    "is_promotional",
    "optional_read",
    "retry_on",
]
