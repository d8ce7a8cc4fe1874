"""Shared pytest fixtures for listcurator tests."""

import sys
from pathlib import Path

import pytest

# Add the package (and the fakes module beside this file) to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))


class SleepRecorder:
    """Stand-in for ``time.sleep`` that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point config, data and ~/.env lookups at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("LISTCURATOR_DATA_DIR", raising=False)
    for key in (
        "X_USERNAME",
        "X_PASSWORD",
        "X_EMAIL",
        "GITHUB_TOKEN",
        "GITHUB_REPO",
        "GEMINI_API_KEY",
        "ANTHROPIC_API_KEY",
        "DISCORD_WEBHOOK_URL",
        "MONITOR_LIST_ID",
    ):
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "home").mkdir()
    return tmp_path
