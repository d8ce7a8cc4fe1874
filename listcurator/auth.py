"""Centralised environment-file parsing and credential helpers."""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError


def load_env_file(path: Path | None = None) -> dict[str, str]:
    """Parse a .env file, returning a dict of key-value pairs.

    Skips blank lines and comments.  Handles ``export KEY=value`` and
    quoted values.  If *path* is ``None`` the default ``~/.env`` is used.
    """
    if path is None:
        path = Path.home() / ".env"

    env: dict[str, str] = {}
    if not path.exists():
        return env

    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            if line.startswith("export "):
                line = line[7:]
            key, value = line.split("=", 1)
            value = value.strip("\"'")
            env[key] = value

    return env


def get_secret(key_name: str) -> str | None:
    """Return a secret from the environment or ``~/.env``, or ``None``."""
    value = os.environ.get(key_name)
    if not value:
        value = load_env_file().get(key_name)
    return value or None


def get_api_key(key_name: str) -> str:
    """Return an API key from the environment or ``~/.env``.

    Raises ``ConfigError`` when the key cannot be found.
    """
    value = get_secret(key_name)
    if not value:
        raise ConfigError(f"{key_name} not set")
    return value


@dataclass
class XCredentials:
    """Login credentials for the X web UI."""

    username: str
    password: str
    email: str | None = None


def get_x_credentials() -> XCredentials:
    """Read X login credentials (``X_USERNAME``, ``X_PASSWORD``, optional ``X_EMAIL``)."""
    return XCredentials(
        username=get_api_key("X_USERNAME"),
        password=get_api_key("X_PASSWORD"),
        email=get_secret("X_EMAIL"),
    )
