"""Version of the installed tari-deploy distribution."""

from __future__ import annotations

from importlib import metadata as importlib_metadata

DISTRIBUTION = "tari-deploy"

# Used when running from a source tree that was never installed.
__version__ = "0.1.0"


def version() -> str:
    """Installed distribution version, or `__version__` for an uninstalled checkout."""
    try:
        return importlib_metadata.version(DISTRIBUTION)
    except importlib_metadata.PackageNotFoundError:
        return __version__


__all__ = ["DISTRIBUTION", "__version__", "version"]
