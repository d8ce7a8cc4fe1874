"""Data models for listcurator."""

from __future__ import annotations

from .config import (
    BrowserConfig,
    CuratorConfig,
    DiscordConfig,
    DiscoveryConfig,
    DiscoveryOptions,
    Folder,
    GitHubConfig,
    LLMConfig,
    PathsConfig,
    PipelineConfig,
    SelectorConfig,
    TrackerConfig,
)
from .feed import FeedItem, Segment, count_words
from .results import FolderResult, ListValidation, NotifyDecision, PublishResult, ValidationSummary

__all__ = [
    "BrowserConfig",
    "CuratorConfig",
    "DiscordConfig",
    "DiscoveryConfig",
    "DiscoveryOptions",
    "FeedItem",
    "Folder",
    "FolderResult",
    "GitHubConfig",
    "LLMConfig",
    "ListValidation",
    "NotifyDecision",
    "PathsConfig",
    "PipelineConfig",
    "PublishResult",
    "Segment",
    "SelectorConfig",
    "TrackerConfig",
    "ValidationSummary",
    "count_words",
]
