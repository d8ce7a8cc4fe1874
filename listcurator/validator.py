"""Check that configured list ids still resolve to readable list pages."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .models.config import Folder
from .models.results import ListValidation, ValidationSummary
from .pipeline import list_url

log = logging.getLogger(__name__)

ERROR_TEXT_RE = re.compile(r"doesn't exist|not found|Something went wrong", re.IGNORECASE)
LOADED_SELECTOR = '[data-testid="cellInnerDiv"], [data-testid="emptyState"], [data-testid="primaryColumn"]'
CONTENT_SELECTOR = '[data-testid="cellInnerDiv"], [data-testid="emptyState"]'
BLANK_PAGE_BYTES = 5000


def validate_list(
    page: Page,
    list_id: str,
    folder: str = "",
    max_retries: int = 2,
    sleep: Callable[[float], None] = time.sleep,
) -> ListValidation:
    """Load one list page and classify it. A near-empty page is retried."""

    def result(valid: bool, reason: str) -> ListValidation:
        return ListValidation(list_id=list_id, valid=valid, reason=reason, folder=folder)

    for attempt in range(max_retries + 1):
        try:
            page.goto(list_url(list_id), wait_until="domcontentloaded")
            sleep(5)

            if page.get_by_text(ERROR_TEXT_RE).count() > 0:
                return result(False, "Page not found or error message displayed")
            if list_id not in page.url:
                return result(False, "Redirected away from list page")

            blank = len(page.content()) < BLANK_PAGE_BYTES
            try:
                page.wait_for_selector(LOADED_SELECTOR, timeout=15_000)
                sleep(2)
                has_content = bool(page.query_selector_all(CONTENT_SELECTOR))
            except PlaywrightTimeoutError:
                has_content = False
        except PlaywrightError as e:
            return result(False, f"Error: {e}")

        if has_content:
            return result(True, "List page loaded successfully")
        if blank and attempt < max_retries:
            log.warning("Blank page for list %s, retrying (%d/%d)", list_id, attempt + 1, max_retries)
            sleep(10)
            continue
        return result(False, f"Could not find list content (after {attempt + 1} attempts)")

    return result(False, "Could not find list content")


def validate_all(
    page: Page,
    folders: list[Folder],
    pause_seconds: float = 3.0,
    sleep: Callable[[float], None] = time.sleep,
    validate: Callable[..., ListValidation] = validate_list,
) -> ValidationSummary:
    summary = ValidationSummary()
    for folder in folders:
        log.info("Validating folder %s (%d lists)", folder.name, len(folder.lists))
        for list_id in folder.lists:
            outcome = validate(page, list_id, folder=folder.name, sleep=sleep)
            summary.total += 1
            if outcome.valid:
                summary.valid += 1
                log.info("  %s: ok", list_id)
            else:
                summary.invalid.append(outcome)
                log.warning("  %s: %s", list_id, outcome.reason)
            sleep(pause_seconds)
    log.info("%d/%d lists valid (%.1f%%)", summary.valid, summary.total, summary.valid_percentage)
    return summary
