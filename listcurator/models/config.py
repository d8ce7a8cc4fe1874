"""Pydantic models for listcurator configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DiscoveryOptions(BaseModel):
    """Tunables for one scroll-discovery call."""

    target_count: int = Field(default=15, ge=1)
    max_scroll_attempts: int = Field(default=100, ge=1)
    scroll_pause_seconds: float = Field(default=3.0, ge=0)
    max_consecutive_no_new_content: int = Field(default=10, ge=1)
    min_acceptance_signal: int = Field(default=15, ge=0)
    initial_wait_seconds: float = Field(default=10.0, ge=0)
    # Promotional posts; short_phrases only reject items under short_post_chars.
    reject_phrases: list[str] = ["Follow me", "RT if", "retweet if"]
    reject_short_phrases: list[str] = ["giveaway", "contest"]
    short_post_chars: int = Field(default=120, ge=0)


class DiscoveryConfig(DiscoveryOptions):
    """Discovery options plus engine-level settings."""

    min_interval_seconds: float = 5.0
    ledger_ceiling: int = 10_000
    extract_retry_attempts: int = 3
    extract_retry_delay: float = 0.5
    max_thread_length: int = 25

    def options(self) -> DiscoveryOptions:
        return DiscoveryOptions(**{name: getattr(self, name) for name in DiscoveryOptions.model_fields})


class SelectorConfig(BaseModel):
    """CSS selectors and URL rules used to read feed items."""

    item: str = 'article[data-testid="tweet"]'
    text: str = '[data-testid="tweetText"]'
    quote_text: str | None = None
    container: str = '[data-testid="cellInnerDiv"]'
    author_link: str = '[data-testid="User-Name"] a'
    link: str = "a[href]"
    image: str = '[data-testid="tweetPhoto"] img'
    video: str = "video"
    time: str = "time"
    permalink_pattern: str = r"/status/(\d+)"
    site_origin: str = "https://x.com"
    internal_hosts: list[str] = ["x.com", "twitter.com"]


class BrowserConfig(BaseModel):
    """Browser launch / attach configuration."""

    cdp_url: str | None = None
    headless: bool = True
    storage_state: str | None = None
    block_resources: bool = True
    navigation_timeout_seconds: float = 60.0
    default_timeout_seconds: float = 180.0
    typing_delay_ms: int = 100
    screenshot_dir: str | None = None


class LLMConfig(BaseModel):
    """LLM provider and model configuration."""

    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    max_output_tokens: int = 32768
    temperature: float = 0.7
    requests_per_minute: int = 55
    retry_max_attempts: int = 4
    retry_base_seconds: float = 60.0
    retry_max_seconds: float = 240.0
    retry_jitter: float = 0.3
    footer: str = ""


class GitHubConfig(BaseModel):
    """Target repository settings (the token and repo come from credentials)."""

    branch: str = "main"
    rate_limit_buffer: int = 100
    committer_name: str | None = None
    committer_email: str | None = None
    readme_title: str = "AI Resources"
    readme_tagline: str = ""


class DiscordConfig(BaseModel):
    """Discord webhook configuration."""

    enabled: bool = True
    timeout_seconds: float = 10.0


class TrackerConfig(BaseModel):
    """Monitor-mode configuration."""

    check_interval_seconds: float = 60.0
    keywords: list[str] = []
    send_all: bool = False
    max_scroll_attempts: int = 1
    min_acceptance_signal: int = 1
    navigation_attempts: int = 3
    navigation_retry_seconds: float = 5.0
    browser_max_age_seconds: float = 7200.0
    max_idle_seconds: float = 1800.0
    refresh_after_failures: int = 5
    recover_after_failures: int = 10
    compact_every_checks: int = 100


class PipelineConfig(BaseModel):
    """Orchestrator configuration."""

    max_retries: int = 3
    retry_delay_seconds: float = 5.0
    require_login: bool = True
    announce: bool = False
    announce_template: str = "New {folder} resource added!\n\n{url}"
    schedule_min_hours: int = 1
    schedule_max_hours: int = 16

    @field_validator("schedule_max_hours")
    @classmethod
    def clamp_hours(cls, v: int) -> int:
        return max(1, min(23, int(v)))


class PathsConfig(BaseModel):
    """Paths configuration."""

    data_dir: str | None = None


class Folder(BaseModel):
    """A named group of list ids published into one repository folder."""

    name: str
    lists: list[str]
    path: str | None = None

    @property
    def repo_path(self) -> str:
        return self.path or self.name


class CuratorConfig(BaseModel):
    """Top-level listcurator configuration."""

    discovery: DiscoveryConfig = DiscoveryConfig()
    selectors: SelectorConfig = SelectorConfig()
    browser: BrowserConfig = BrowserConfig()
    llm: LLMConfig = LLMConfig()
    github: GitHubConfig = GitHubConfig()
    discord: DiscordConfig = DiscordConfig()
    tracker: TrackerConfig = TrackerConfig()
    pipeline: PipelineConfig = PipelineConfig()
    paths: PathsConfig = PathsConfig()
    folders: list[Folder] = []

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CuratorConfig:
        return cls.model_validate(data)
