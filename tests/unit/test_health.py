"""
Unit tests for the health check service.
"""

import asyncio

from clarus_mens.health import HealthCheckService, HealthStatus


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def returning(status):
    async def _check():
        return status

    return _check


def run(service):
    return asyncio.run(service.check_health())


class TestHealthCheckService:
    def test_no_checks_is_healthy(self):
        report = run(HealthCheckService(cache_ttl=0))

        assert report.status == HealthStatus.HEALTHY
        assert report.checks == {}

    def test_worst_status_wins(self):
        service = HealthCheckService(cache_ttl=0)
        service.register("a", returning(HealthStatus.HEALTHY))
        service.register("b", returning(HealthStatus.DEGRADED))

        assert run(service).status == HealthStatus.DEGRADED

        service.register("c", returning(HealthStatus.UNHEALTHY))
        report = run(service)

        assert report.status == HealthStatus.UNHEALTHY
        assert report.checks == {
            "a": HealthStatus.HEALTHY,
            "b": HealthStatus.DEGRADED,
            "c": HealthStatus.UNHEALTHY,
        }

    def test_raising_check_is_unhealthy(self, caplog):
        async def broken():
            raise RuntimeError("database unreachable")

        service = HealthCheckService(cache_ttl=0)
        service.register("db", broken)

        report = run(service)

        assert report.status == HealthStatus.UNHEALTHY
        assert report.checks["db"] == HealthStatus.UNHEALTHY
        assert "database unreachable" in caplog.text

    def test_report_cached_within_ttl(self):
        clock = FakeClock()
        calls = []

        async def counting():
            calls.append(1)
            return HealthStatus.HEALTHY

        service = HealthCheckService(cache_ttl=30, clock=clock)
        service.register("counting", counting)

        run(service)
        clock.now += 10
        run(service)
        assert len(calls) == 1

        clock.now += 30
        report = run(service)
        assert len(calls) == 2
        assert report.uptime_seconds == 40

    def test_uptime_current_for_cached_report(self):
        clock = FakeClock()
        service = HealthCheckService(cache_ttl=30, clock=clock)
        service.register("ok", returning(HealthStatus.HEALTHY))

        assert run(service).uptime_seconds == 0

        clock.now += 12
        report = run(service)

        assert report.uptime_seconds == 12
        assert report.checks == {"ok": HealthStatus.HEALTHY}

    def test_register_invalidates_cache(self):
        service = HealthCheckService(cache_ttl=300)
        assert run(service).status == HealthStatus.HEALTHY

        service.register("down", returning(HealthStatus.UNHEALTHY))

        assert run(service).status == HealthStatus.UNHEALTHY

    def test_string_status_accepted(self):
        service = HealthCheckService(cache_ttl=0)
        service.register("legacy", returning("Degraded"))

        assert run(service).status == HealthStatus.DEGRADED
