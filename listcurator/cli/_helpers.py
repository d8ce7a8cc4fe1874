"""Shared CLI utilities."""

import re

import rich_click as click
from pydantic import ValidationError

from ..auth import get_api_key
from ..config import get_screenshot_dir, get_storage_state_path, load_config
from ..errors import ConfigError
from ..models.config import CuratorConfig, Folder
from ..publisher import GitHubPublisher


def _normalize_list_id(list_id_or_url: str) -> str:
    """Normalize a list argument to a numeric list id when possible."""
    value = list_id_or_url.strip()
    if value.isdigit():
        return value

    match = re.search(r"/lists/(\d+)", value)
    if match:
        return match.group(1)

    return value


def load_settings() -> CuratorConfig:
    """Load and validate configuration, or exit with a readable error."""
    try:
        settings = CuratorConfig.from_dict(load_config())
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}") from e
    # Reuse a saved login when nothing else is configured
    if not settings.browser.storage_state:
        state = get_storage_state_path()
        if state.exists():
            settings.browser.storage_state = str(state)
    return settings


def select_folders(settings: CuratorConfig, names: tuple[str, ...]) -> list[Folder]:
    if not names:
        return settings.folders
    wanted = {n.lower() for n in names}
    selected = [f for f in settings.folders if f.name.lower() in wanted]
    missing = wanted - {f.name.lower() for f in selected}
    if missing:
        raise click.UsageError(f"Unknown folder(s): {', '.join(sorted(missing))}")
    return selected


def build_publisher(settings: CuratorConfig) -> GitHubPublisher:
    gh = settings.github
    committer = None
    if gh.committer_name and gh.committer_email:
        committer = {"name": gh.committer_name, "email": gh.committer_email}
    try:
        return GitHubPublisher(
            token=get_api_key("GITHUB_TOKEN"),
            repo=get_api_key("GITHUB_REPO"),
            branch=gh.branch,
            committer=committer,
            rate_limit_buffer=gh.rate_limit_buffer,
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def screenshot_dir():
    path = get_screenshot_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path
