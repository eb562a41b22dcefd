"""
Clarus Mens - informational question answering API

This package provides a small FastAPI service exposing root status, a
keyword-based question answering stub, version information and a health
check, with SemVer-based version reporting and configurable API metadata.
"""

__version__ = "0.1.0"
__author__ = "Clarus Mens Team"
__description__ = "Informational question answering API"

# Import main components for public API
from .semver import SemVersion
from .version import VersionService, VersionState, resolve_version

# Define public API exports
__all__ = [
    "SemVersion",
    "VersionService",
    "VersionState",
    "resolve_version",
    "__version__",
    "__author__",
    "__description__",
]
