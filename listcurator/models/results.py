"""Pydantic models for results reported by the publishing collaborators."""

from __future__ import annotations

from pydantic import BaseModel


class PublishResult(BaseModel):
    """Outcome of uploading one markdown file."""

    success: bool
    url: str = ""
    number: int | None = None
    path: str = ""
    message: str = ""
    status: int | None = None


class FolderResult(BaseModel):
    """One folder that produced a published article."""

    folder: str
    list_id: str
    item_count: int
    publish: PublishResult
    announced: bool = False


class NotifyDecision(BaseModel):
    """Whether a monitored post should be pushed to the webhook."""

    send: bool
    reason: str = ""


class ListValidation(BaseModel):
    """Result of checking one list page."""

    list_id: str
    valid: bool
    reason: str = ""
    folder: str = ""


class ValidationSummary(BaseModel):
    """Aggregate of ``ListValidation`` results."""

    total: int = 0
    valid: int = 0
    invalid: list[ListValidation] = []

    @property
    def valid_percentage(self) -> float:
        if not self.total:
            return 0.0
        return round(self.valid / self.total * 100, 1)
