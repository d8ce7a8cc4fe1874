"""Configuration management for listcurator."""

import copy
import json
import os
from pathlib import Path
from typing import Any

# Application name for XDG paths
APP_NAME = "listcurator"

# Curated list folders. Each folder becomes one directory in the published repo.
DEFAULT_FOLDERS: list[dict[str, Any]] = [
    {
        "name": "AI Tools and Resources",
        "lists": [
            "1183066543174881282",
            "1594632801785094146",
            "1394275179077914632",
            "1400568686931550217",
            "1091845227416092673",
            "1762486484111634815",
        ],
    },
    {
        "name": "Coding and Software Development",
        "lists": [
            "1281694355024011265",
            "1403650939047890946",
            "1247246664076800007",
            "1299970078230765568",
            "1422301561133228032",
            "1762520870393184573",
            "1762520567314686389",
        ],
    },
    {
        "name": "Productivity and Passive Income",
        "lists": [
            "928982358082179072",
            "1591607866091339786",
            "1195113292085317632",
            "1022182056808402945",
            "1498705679241998337",
        ],
    },
    {"name": "AI Artists and Creators", "lists": ["1762485748469383596"]},
    {"name": "AI Companies and Ventures", "lists": ["1762486094323220861", "1762486224492310958"]},
    {"name": "AI Leaders and Thinkers", "lists": ["1762487240196346177", "1762487348818161907"]},
    {"name": "AI in Healthcare and Science", "lists": ["1762487537213399163"]},
    {"name": "AI and Robotics Applications", "lists": ["1762488661568364895"]},
    {"name": "Crypto and Web 3.0", "lists": ["1762520311717740895", "1762520423411843514"]},
    {
        "name": "Founders and Entrepreneurs",
        "lists": ["1762521224293441979", "1762521323595571655", "1762521414485385621"],
    },
    {"name": "Cybersecurity and Tech", "lists": ["1762522507277680798"]},
    {"name": "Tech Companies and News", "lists": ["1762522758941188590", "1762522913228988689"]},
]

# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "discovery": {
        "target_count": 15,
        "max_scroll_attempts": 100,
        "scroll_pause_seconds": 3.0,
        "max_consecutive_no_new_content": 10,
        "min_acceptance_signal": 15,  # words
        "initial_wait_seconds": 10.0,
        "reject_phrases": ["Follow me", "RT if", "retweet if"],
        "reject_short_phrases": ["giveaway", "contest"],
        "short_post_chars": 120,
        "min_interval_seconds": 5.0,  # between feed fetches
        "ledger_ceiling": 10_000,
        "extract_retry_attempts": 3,
        "extract_retry_delay": 0.5,
        "max_thread_length": 25,
    },
    "selectors": {
        "item": 'article[data-testid="tweet"]',
        "text": '[data-testid="tweetText"]',
        "quote_text": None,  # None = second text region inside the item
        "container": '[data-testid="cellInnerDiv"]',
        "author_link": '[data-testid="User-Name"] a',
        "link": "a[href]",
        "image": '[data-testid="tweetPhoto"] img',
        "video": "video",
        "time": "time",
        "permalink_pattern": r"/status/(\d+)",
        "site_origin": "https://x.com",
        "internal_hosts": ["x.com", "twitter.com"],
    },
    "browser": {
        "cdp_url": None,  # e.g. http://127.0.0.1:9222 to attach to a running Chrome
        "headless": True,
        "storage_state": None,
        "block_resources": True,
        "navigation_timeout_seconds": 60.0,
        "default_timeout_seconds": 180.0,
        "typing_delay_ms": 100,
        "screenshot_dir": None,  # None = data dir
    },
    "llm": {
        "provider": "gemini",
        "model": "gemini-2.5-flash",
        "max_output_tokens": 32768,
        "temperature": 0.7,
        "requests_per_minute": 55,
        "retry_max_attempts": 4,
        "retry_base_seconds": 60.0,
        "retry_max_seconds": 240.0,
        "retry_jitter": 0.3,
        "footer": (
            "---\n\n### ⭐️ Support\n\n"
            "If you found these resources useful, star this repository to help others discover them.\n\n---"
        ),
    },
    "github": {
        "branch": "main",
        "rate_limit_buffer": 100,
        "committer_name": None,
        "committer_email": None,
        "readme_title": "AI Resources",
        "readme_tagline": "Curated tools, threads and resources collected from expert lists on X.",
    },
    "discord": {
        "enabled": True,
        "timeout_seconds": 10.0,
    },
    "tracker": {
        "check_interval_seconds": 60.0,
        "keywords": [],
        "send_all": False,
        "max_scroll_attempts": 1,
        "min_acceptance_signal": 1,
        "navigation_attempts": 3,
        "navigation_retry_seconds": 5.0,
        "browser_max_age_seconds": 2 * 60 * 60,
        "max_idle_seconds": 30 * 60,
        "refresh_after_failures": 5,
        "recover_after_failures": 10,
        "compact_every_checks": 100,
    },
    "pipeline": {
        "max_retries": 3,
        "retry_delay_seconds": 5.0,
        "require_login": True,
        "announce": False,
        "announce_template": (
            "New {folder} resource added!\n\nCheck out the latest collection here:\n{url}"
        ),
        "schedule_min_hours": 1,
        "schedule_max_hours": 16,
    },
    "paths": {
        # If not set, XDG defaults are used
        "data_dir": None,
    },
    "folders": DEFAULT_FOLDERS,
}


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))


def get_xdg_data_home() -> Path:
    """Get XDG data home directory."""
    return Path(os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")))


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_xdg_config_home() / APP_NAME / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration, merging with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        with open(config_path) as f:
            user_config = json.load(f)
            config = deep_merge(config, user_config)

    return config


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_data_dir() -> Path:
    """
    Get the data directory for listcurator.

    Priority:
    1. LISTCURATOR_DATA_DIR environment variable
    2. paths.data_dir in config.json
    3. XDG default: ~/.local/share/listcurator/
    """
    env_dir = os.environ.get("LISTCURATOR_DATA_DIR")
    if env_dir:
        return Path(env_dir)

    config = load_config()
    config_dir = config.get("paths", {}).get("data_dir")
    if config_dir:
        return Path(config_dir)

    return get_xdg_data_home() / APP_NAME


def get_screenshot_dir() -> Path:
    """Directory for diagnostic screenshots."""
    configured = load_config().get("browser", {}).get("screenshot_dir")
    if configured:
        return Path(configured)
    return get_data_dir() / "screenshots"


def get_storage_state_path() -> Path:
    """Default location of the saved browser login state."""
    return get_data_dir() / "storage_state.json"
