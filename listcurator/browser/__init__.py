"""Browser lifecycle and account actions."""

from .compose import post_status
from .login import is_logged_in, login
from .session import (
    DIAGNOSTIC_SCREENSHOTS,
    BrowserHandle,
    cleanup_screenshots,
    launch_browser,
    open_browser,
    save_screenshot,
)

__all__ = [
    "DIAGNOSTIC_SCREENSHOTS",
    "BrowserHandle",
    "cleanup_screenshots",
    "is_logged_in",
    "launch_browser",
    "login",
    "open_browser",
    "post_status",
    "save_screenshot",
]
