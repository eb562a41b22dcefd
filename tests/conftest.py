"""
Pytest configuration and shared fixtures for Clarus Mens tests.

This module provides common test fixtures and configuration for both
unit and integration tests.
"""

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _stable_env(monkeypatch, tmp_path):
    """
    Automatically set stable environment variables for all tests.

    Clears every ``CLARUS_*`` variable so configuration overrides from the
    developer's shell never leak into tests, and points the settings
    directory at an empty temporary directory.
    """
    for name in list(os.environ):
        if name.upper().startswith("CLARUS_"):
            monkeypatch.delenv(name, raising=False)

    config_dir = tmp_path / "config"
    config_dir.mkdir()

    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("LOG_DIR", raising=False)
    monkeypatch.setenv("CLARUS_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("SERVER_NAME", "test-clarus-mens")


@pytest.fixture
def config_dir():
    """The temporary settings directory used by the current test."""
    return Path(os.environ["CLARUS_CONFIG_DIR"])


@pytest.fixture
def write_settings(config_dir):
    """Write an appsettings YAML file into the settings directory."""

    def _write(filename: str, content: str) -> Path:
        path = config_dir / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_settings_yaml():
    """Provide base appsettings content for testing."""
    return """
ApiVersion: v1
ApiInfo:
  Name: Clarus Mens API
  Description: Base description
  Contact:
    Name: Test Team
    Email: team@example.com
  License:
    Name: Apache License 2.0
    Url: https://example.com/LICENSE
"""


@pytest.fixture
def development_settings_yaml():
    """Provide Development overrides for testing."""
    return """
ApiInfo:
  Name: Clarus Mens API (Development)
  Description: Development instance of the Clarus Mens question answering service
"""


@pytest.fixture
def version_service_factory():
    """Build a VersionService for a version string and environment name."""
    from clarus_mens.environment import StaticEnvironment
    from clarus_mens.version import VersionService, resolve_version

    def _create(version: str = "1.2.3", informational: str | None = None, environment: str = "Production"):
        state = resolve_version(version, informational)
        return VersionService(state, StaticEnvironment(environment))

    return _create


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)
