"""Exception hierarchy shared by the discovery engine and its collaborators."""


class ListCuratorError(Exception):
    """Base class for all listcurator errors."""


class ScrapeError(ListCuratorError):
    """A browser-side read or command failed."""


class StaleElementError(ScrapeError):
    """An element reference became invalid mid-read (the document mutated)."""


class ElementReadError(ScrapeError):
    """An optional element read failed; callers degrade to "absent"."""


class SessionError(ScrapeError):
    """The session itself is unusable; the discovery call cannot continue."""


class NavigationError(SessionError):
    """Navigation timed out or failed at the network level."""


class ScrollError(SessionError):
    """The session refused to scroll or report document height."""


class LoginError(SessionError):
    """Credential login did not reach a logged-in state."""


class SummarizerError(ListCuratorError):
    """The language model did not produce usable markdown."""


class PublishError(ListCuratorError):
    """The repository rejected or could not accept a file."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ConfigError(ListCuratorError):
    """Required configuration or credentials are missing."""
