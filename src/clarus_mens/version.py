"""Version resolution for the Clarus Mens API.

This module turns the raw build version fields supplied by the packaging step
into a SemVer identity and formats it for display. Resolution is best-effort:
missing or malformed inputs degrade to fewer fields (or ``0.0.0``) and are
logged, because version metadata must never block request handling.

The resolved ``VersionState`` is computed once at startup and handed to the
components that need it; nothing here is recomputed per request.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .environment import HostEnvironment, is_production
from .semver import SemVersion

logger = logging.getLogger(__name__)

# <digits>.<digits>.<digits>[-<prerelease>][+<buildmetadata>]
INFORMATIONAL_VERSION_PATTERN = re.compile(
    r"^\d+\.\d+\.\d+"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)

# major.minor.patch with an optional fourth revision component; anything after
# the numeric part (suffixes) is ignored
BASE_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)\.(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True)
class AssemblyVersion:
    """Platform style four-part version used only for display."""

    major: int = 0
    minor: int = 0
    build: int = 0
    revision: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}.{self.revision}"


@dataclass(frozen=True)
class VersionState:
    """Resolved process version. Shared read-only by all handlers."""

    sem_version: SemVersion
    assembly_version: AssemblyVersion


def parse_base_version(text: Optional[str]) -> AssemblyVersion:
    """
    Parse the dotted base version.

    Args:
        text: Version text such as ``1.2.3`` or ``1.2.3.4``

    Returns:
        AssemblyVersion, ``0.0.0.0`` when the text is missing or malformed
    """
    if not text:
        logger.warning("No build version available, using 0.0.0")
        return AssemblyVersion()

    match = BASE_VERSION_PATTERN.match(text)
    if not match:
        logger.warning(f"Unparseable build version {text!r}, using 0.0.0")
        return AssemblyVersion()

    major, minor, build, revision = match.groups()
    return AssemblyVersion(int(major), int(minor), int(build), int(revision or 0))


def parse_informational_version(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Extract pre-release and build metadata from an informational version.

    Returns:
        ``(prerelease, build_metadata)``; both ``None`` when the text is
        missing or does not match the expected pattern
    """
    if not text:
        return None, None

    match = INFORMATIONAL_VERSION_PATTERN.match(text.strip())
    if not match:
        logger.debug(f"Informational version {text!r} is not SemVer, ignoring suffixes")
        return None, None

    return match.group("prerelease"), match.group("build")


def resolve_version(
    base_version: Optional[str],
    informational_version: Optional[str] = None,
) -> VersionState:
    """
    Combine the base triple and informational suffixes into a VersionState.

    The base version always supplies major, minor and patch; the
    informational version only contributes suffixes.
    """
    assembly = parse_base_version(base_version)
    prerelease, build_metadata = parse_informational_version(informational_version)
    sem_version = SemVersion(
        assembly.major,
        assembly.minor,
        assembly.build,
        prerelease,
        build_metadata,
    )
    return VersionState(sem_version=sem_version, assembly_version=assembly)


class VersionService:
    """
    Version information for request handlers.

    The environment is an injected collaborator, so display formatting can be
    exercised with any environment name. Subclasses may override the getters
    to supply a controlled version.
    """

    def __init__(self, state: VersionState, environment: HostEnvironment):
        self._state = state
        self._environment = environment

    @classmethod
    def from_settings(cls, settings, environment: HostEnvironment) -> "VersionService":
        """Resolve the version from runtime settings."""
        state = resolve_version(settings.build_version, settings.informational_version)
        return cls(state, environment)

    @property
    def environment(self) -> HostEnvironment:
        return self._environment

    def get_sem_version(self) -> SemVersion:
        return self._state.sem_version

    def get_assembly_version(self) -> AssemblyVersion:
        return self._state.assembly_version

    def get_version_string(self) -> str:
        """Canonical SemVer string with a ``v`` prefix, e.g. ``v1.2.3-beta``."""
        return f"v{self.get_sem_version()}"

    def get_display_version(self) -> str:
        """
        SemVer string qualified with the environment outside production.

        ``1.2.3-beta`` in Production, ``1.2.3-beta (Development)`` elsewhere.
        """
        version = str(self.get_sem_version())
        if not is_production(self._environment):
            version = f"{version} ({self._environment.environment_name})"
        return version

    def get_version_info(self) -> Dict[str, Any]:
        """
        Version report as served by the version endpoint.

        Returns:
            Dictionary with ``version`` (``v``-prefixed SemVer), ``semVer``
            and ``assemblyVersion``
        """
        return {
            "version": self.get_version_string(),
            "semVer": self.get_sem_version().to_dict(),
            "assemblyVersion": str(self.get_assembly_version()),
        }


__all__ = [
    "AssemblyVersion",
    "VersionState",
    "VersionService",
    "parse_base_version",
    "parse_informational_version",
    "resolve_version",
    "INFORMATIONAL_VERSION_PATTERN",
]
