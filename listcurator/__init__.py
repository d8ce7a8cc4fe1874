"""List curator - discover substantive posts from curated X lists and publish them as articles."""

try:
    from importlib.metadata import version

    __version__ = version("listcurator")
except Exception:
    __version__ = "0.0.0-dev"
