"""prwatch - Pull request CI and review status watcher."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed prwatch version."""
    return __version__
