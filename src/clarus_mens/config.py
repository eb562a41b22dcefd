"""Configuration management for Clarus Mens.

Two layers live here:

* ``Settings`` holds process settings read from environment variables
  (server binding, logging, build version inputs).
* ``AppConfiguration`` is the read-only, colon-delimited key lookup used for
  API metadata (``ApiVersion``, ``ApiInfo:Name``, ...). It layers
  ``appsettings.yaml``, ``appsettings.{Environment}.yaml`` and ``CLARUS_``
  prefixed environment variables, later layers winning.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

import jsonschema
import yaml

from .environment import ENVIRONMENT_VARIABLE, PRODUCTION

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = "config"
BASE_SETTINGS_FILE = "appsettings.yaml"
ENV_OVERRIDE_PREFIX = "CLARUS_"
KEY_DELIMITER = ":"
ENV_KEY_DELIMITER = "__"

_OPTIONAL_STRING = {"type": ["string", "null"]}

# Shape of an appsettings document. Only the sections read by the service are
# constrained; anything else is passed through. Blank values (null) mean unset.
APPSETTINGS_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "ApiVersion": _OPTIONAL_STRING,
        "ApiInfo": {
            "type": ["object", "null"],
            "properties": {
                "Name": _OPTIONAL_STRING,
                "Description": _OPTIONAL_STRING,
                "TermsOfService": _OPTIONAL_STRING,
                "Contact": {
                    "type": ["object", "null"],
                    "properties": {"Name": _OPTIONAL_STRING, "Email": _OPTIONAL_STRING},
                    "additionalProperties": False,
                },
                "License": {
                    "type": ["object", "null"],
                    "properties": {"Name": _OPTIONAL_STRING, "Url": _OPTIONAL_STRING},
                    "additionalProperties": False,
                },
            },
            "additionalProperties": False,
        },
    },
}


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


def _env_int(name: str, default: str) -> int:
    value = os.environ.get(name, default)
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid integer value for {name}: {value}")


def _package_version() -> str:
    """Best-effort detection of the installed package version."""

    try:
        from clarus_mens import __version__

        return str(__version__)
    except ImportError:
        return "0.0.0"


class Settings:
    """Process settings with defaults, immutable after initialization."""

    def __init__(self):
        package_version = _package_version()

        self._defaults = {
            # Server configuration
            "server_name": os.environ.get("SERVER_NAME", "clarus-mens"),
            "host": os.environ.get("HOST", "0.0.0.0"),  # nosec B104 - Intentional for container deployment
            "port": _env_int("PORT", "8080"),
            "log_level": os.environ.get("LOG_LEVEL", "INFO"),
            "log_dir": os.environ.get("LOG_DIR", ""),

            # Deployment environment and application settings location
            "environment": os.environ.get(ENVIRONMENT_VARIABLE) or PRODUCTION,
            "config_dir": os.environ.get("CLARUS_CONFIG_DIR", DEFAULT_CONFIG_DIR),

            # Build version inputs
            "build_version": os.environ.get("CLARUS_BUILD_VERSION") or package_version,
            "informational_version": (
                os.environ.get("CLARUS_INFORMATIONAL_VERSION") or package_version
            ),

            "health_cache_ttl": _env_int("HEALTH_CACHE_TTL", "30"),
            "source_url": os.environ.get(
                "SOURCE_URL", "https://github.com/pstackebrandt/clarus-mens"
            ),
        }

    def __getattr__(self, name: str) -> Any:
        """Get configuration value."""
        try:
            defaults = object.__getattribute__(self, "_defaults")
        except AttributeError:
            raise AttributeError(name)
        if name in defaults:
            return defaults[name]
        raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification of settings after initialization."""
        try:
            defaults = object.__getattribute__(self, "_defaults")
        except AttributeError:
            defaults = {}
        if name in defaults:
            raise AttributeError(f"Configuration is immutable: cannot set '{name}'")
        super().__setattr__(name, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with optional default."""
        return self._defaults.get(key, default)

    def validate(self) -> List[str]:
        """Validate settings and return list of errors.

        Returns:
            List of validation error messages. Empty list means valid.
        """
        errors = []

        if not 0 < self.port < 65536:
            errors.append(f"PORT out of range: {self.port}")

        if self.health_cache_ttl < 0:
            errors.append(f"HEALTH_CACHE_TTL must not be negative: {self.health_cache_ttl}")

        config_dir = Path(self.config_dir)
        if config_dir.exists() and not config_dir.is_dir():
            errors.append(f"Config path is not a directory: {config_dir}")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return self._defaults.copy()

    def __repr__(self) -> str:
        return f"Settings(environment={self.environment}, config_dir={self.config_dir})"

    def get_startup_summary(self) -> Dict[str, Any]:
        """Get startup configuration summary for logging.

        Returns:
            Dictionary with key configuration values for startup logging
        """
        return {
            "server_name": self.server_name,
            "environment": self.environment,
            "config_dir": self.config_dir,
            "build_version": self.build_version,
            "informational_version": self.informational_version,
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
        }

    @classmethod
    def load_runtime_config(cls) -> "Settings":
        """Load settings from the current process environment."""
        return cls()


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Iterator[tuple]:
    """Yield ``(colon:key, string value)`` pairs for a nested mapping."""
    for key, value in data.items():
        path = f"{prefix}{KEY_DELIMITER}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from _flatten(value, path)
        elif isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, Mapping):
                    yield from _flatten(item, f"{path}{KEY_DELIMITER}{index}")
                else:
                    yield f"{path}{KEY_DELIMITER}{index}", _scalar(item)
        else:
            yield path, _scalar(value)


def _scalar(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_settings_document(path: Path) -> Dict[str, Any]:
    """
    Load and validate one appsettings YAML document.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed document, empty when the file is empty

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in settings file {path}: {e}")

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    validator = jsonschema.Draft202012Validator(APPSETTINGS_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda e: list(e.path))
    if errors:
        details = "; ".join(
            f"{KEY_DELIMITER.join(str(p) for p in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        raise ConfigurationError(f"Invalid settings file {path}: {details}")

    return document


class AppConfiguration:
    """
    Read-only, case-insensitive key lookup over layered settings.

    Keys are colon-delimited paths such as ``ApiInfo:License:Url``. Missing
    keys return ``None`` (or the supplied default), never an error.
    """

    def __init__(self, values: Optional[Mapping[str, Optional[str]]] = None):
        self._values: Dict[str, Optional[str]] = {}
        for key, value in (values or {}).items():
            self._values[key.lower()] = value

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key.lower())
        return default if value is None else value

    def __getitem__(self, key: str) -> Optional[str]:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return self._values.get(key.lower()) is not None

    def __len__(self) -> int:
        return len(self._values)

    @classmethod
    def load(
        cls,
        config_dir: str | Path = DEFAULT_CONFIG_DIR,
        environment_name: str = PRODUCTION,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "AppConfiguration":
        """
        Build the layered configuration.

        Args:
            config_dir: Directory holding ``appsettings*.yaml`` files
            environment_name: Selects ``appsettings.{environment_name}.yaml``
            environ: Environment variables, ``os.environ`` by default

        Raises:
            ConfigurationError: If a present settings file is invalid
        """
        if environ is None:
            environ = os.environ

        config_path = Path(config_dir)
        values: Dict[str, Optional[str]] = {}

        for file_name in (BASE_SETTINGS_FILE, f"appsettings.{environment_name}.yaml"):
            path = config_path / file_name
            if not path.is_file():
                logger.debug(f"Settings file not found, skipping: {path}")
                continue
            document = load_settings_document(path)
            for key, value in _flatten(document):
                values[key.lower()] = value
            logger.debug(f"Loaded settings file: {path}")

        for name, value in environ.items():
            if not name.upper().startswith(ENV_OVERRIDE_PREFIX):
                continue
            key = name[len(ENV_OVERRIDE_PREFIX):].replace(ENV_KEY_DELIMITER, KEY_DELIMITER)
            values[key.lower()] = value

        return cls(values)


__all__ = [
    "Settings",
    "AppConfiguration",
    "ConfigurationError",
    "load_settings_document",
    "APPSETTINGS_SCHEMA",
]
