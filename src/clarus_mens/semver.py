"""Semantic Versioning 2.0.0 value type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SemVersion:
    """
    Immutable SemVer 2.0.0 version identifier.

    Major, minor and patch must be non-negative integers; negative or
    non-integer components are rejected with ``ValueError``. Pre-release and
    build metadata are optional and only rendered when non-empty.
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build_metadata: Optional[str] = None

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"SemVer {name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"SemVer {name} must be non-negative, got {value}")

    @property
    def is_prerelease(self) -> bool:
        """True when a non-empty pre-release identifier is present."""
        return bool(self.prerelease)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; absent suffixes are empty strings."""
        return {
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "preRelease": self.prerelease or "",
            "buildMetadata": self.build_metadata or "",
            "isPreRelease": self.is_prerelease,
        }

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version = f"{version}-{self.prerelease}"
        if self.build_metadata:
            version = f"{version}+{self.build_metadata}"
        return version


__all__ = ["SemVersion"]
