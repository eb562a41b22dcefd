"""
Integration tests running the application against the shipped settings files.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from clarus_mens.config import AppConfiguration
from clarus_mens.http_api import create_app

SHIPPED_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


@pytest.fixture
def shipped_config(monkeypatch):
    monkeypatch.setenv("CLARUS_CONFIG_DIR", str(SHIPPED_CONFIG_DIR))
    return SHIPPED_CONFIG_DIR


class TestShippedSettings:
    def test_shipped_files_are_valid(self, shipped_config):
        for environment in ("Production", "Development"):
            AppConfiguration.load(shipped_config, environment, environ={})

    def test_development_overrides(self, shipped_config, monkeypatch):
        monkeypatch.setenv("CLARUS_ENVIRONMENT", "Development")
        monkeypatch.setenv("CLARUS_BUILD_VERSION", "0.1.0")
        monkeypatch.setenv("CLARUS_INFORMATIONAL_VERSION", "0.1.0-dev")

        with TestClient(create_app()) as client:
            root = client.get("/").json()
            info = client.get("/openapi/v0.json").json()["info"]

        assert root["name"] == "Clarus Mens API (Development)"
        assert root["version"] == "0.1.0-dev (Development)"
        assert root["license"]["name"] == "Apache License 2.0"
        assert info["contact"] == {"name": "Clarus Mens Team"}

    def test_production_defaults(self, shipped_config, monkeypatch):
        monkeypatch.setenv("CLARUS_BUILD_VERSION", "1.0.0")
        monkeypatch.setenv("CLARUS_INFORMATIONAL_VERSION", "1.0.0")

        with TestClient(create_app()) as client:
            root = client.get("/").json()
            version = client.get("/api/version").json()
            answer = client.get("/api/question", params={"query": "hello"})

        assert root["name"] == "Clarus Mens API"
        assert root["version"] == "1.0.0"
        assert root["environment"] == "Production"
        assert version["version"] == "v1.0.0"
        assert version["assemblyVersion"] == "1.0.0.0"
        assert answer.status_code == 200

    def test_environment_variable_override(self, shipped_config, monkeypatch):
        monkeypatch.setenv("CLARUS_ApiInfo__Name", "Overridden")

        client = TestClient(create_app())

        assert client.get("/").json()["name"] == "Overridden"
