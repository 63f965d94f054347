"""Version information."""

import platform
import sys
from importlib.metadata import PackageNotFoundError, version

# Release tooling may overwrite these at build time
COMMIT = "none"
BUILD_DATE = "unknown"

try:
    __version__ = version("ollama-mcp")
except PackageNotFoundError:
    __version__ = "dev"


def short_version() -> str:
    """Return just the version number."""
    return __version__


def version_string() -> str:
    """Return the full version line printed by ``--version``."""
    arch = platform.machine().lower() or "unknown"
    return (
        f"ollama-mcp {__version__} ({COMMIT}) built on {BUILD_DATE} "
        f"for {sys.platform}/{arch}"
    )
