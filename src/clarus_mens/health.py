"""Health checks for the HTTP surface.

Checks are named async callables returning a ``HealthStatus``. The overall
status is the worst individual status; a check that raises counts as
unhealthy. Check results are cached per service instance to avoid running
every check on each probe; uptime is computed on every call.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    UNHEALTHY = "Unhealthy"
    DEGRADED = "Degraded"
    HEALTHY = "Healthy"


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}

HealthCheck = Callable[[], Awaitable[HealthStatus]]


@dataclass(frozen=True)
class HealthReport:
    status: HealthStatus
    checks: Dict[str, HealthStatus] = field(default_factory=dict)
    uptime_seconds: int = 0


class HealthCheckService:
    """Runs registered health checks and aggregates their status."""

    def __init__(self, cache_ttl: float = 30, clock: Callable[[], float] = time.monotonic):
        self._checks: Dict[str, HealthCheck] = {}
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._started_at = clock()
        self._cached: Optional[HealthReport] = None
        self._cached_at = 0.0

    def register(self, name: str, check: HealthCheck) -> None:
        """Register a named check, replacing any check with the same name."""
        self._checks[name] = check
        self._cached = None

    async def _run_check(self, name: str, check: HealthCheck) -> HealthStatus:
        try:
            return HealthStatus(await check())
        except Exception as e:
            logger.warning(f"Health check '{name}' failed: {e}", exc_info=True)
            return HealthStatus.UNHEALTHY

    async def check_health(self) -> HealthReport:
        """
        Return the current health report.

        Returns:
            Cached check results while they are younger than the cache TTL,
            otherwise fresh ones. Uptime is always current.
        """
        now = self._clock()
        if self._cached is not None and (now - self._cached_at) < self._cache_ttl:
            return replace(self._cached, uptime_seconds=int(now - self._started_at))

        results = {name: await self._run_check(name, check) for name, check in self._checks.items()}
        status = max(results.values(), key=_SEVERITY.__getitem__, default=HealthStatus.HEALTHY)

        report = HealthReport(
            status=status,
            checks=results,
            uptime_seconds=int(now - self._started_at),
        )
        self._cached = report
        self._cached_at = now

        logger.debug(f"Health check: status={status.value}, checks={len(results)}")
        return report
