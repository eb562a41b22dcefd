"""Deployment environment capability.

The version resolver and the HTTP surface only need the name of the current
deployment environment. It is exposed through the small ``HostEnvironment``
protocol so tests can substitute a fixed name without touching process state.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

PRODUCTION = "Production"
STAGING = "Staging"
DEVELOPMENT = "Development"

ENVIRONMENT_VARIABLE = "CLARUS_ENVIRONMENT"


class HostEnvironment(Protocol):
    """Anything exposing the current environment name."""

    @property
    def environment_name(self) -> str: ...


@dataclass(frozen=True)
class StaticEnvironment:
    """Environment with a fixed name."""

    environment_name: str = PRODUCTION


def is_production(environment: HostEnvironment) -> bool:
    """Exact, case-sensitive comparison against ``Production``."""
    return environment.environment_name == PRODUCTION


def environment_from_os(environ: Optional[Mapping[str, str]] = None) -> StaticEnvironment:
    """
    Read the environment name from ``CLARUS_ENVIRONMENT``.

    Hosting runtimes treat an unset environment as production, so this does
    too. The value is used verbatim.
    """
    if environ is None:
        environ = os.environ
    return StaticEnvironment(environ.get(ENVIRONMENT_VARIABLE) or PRODUCTION)


__all__ = [
    "HostEnvironment",
    "StaticEnvironment",
    "is_production",
    "environment_from_os",
    "PRODUCTION",
    "STAGING",
    "DEVELOPMENT",
    "ENVIRONMENT_VARIABLE",
]
