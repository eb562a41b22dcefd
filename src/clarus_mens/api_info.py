"""API documentation metadata.

Builds the documentation descriptor (title, version, description, contact,
license, terms of service) consumed by OpenAPI tooling. Each field is resolved
from an ordered list of sources, the first non-empty value winning:
configuration key, then hard-coded default, else the field is omitted.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .config import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_API_NAME = "Clarus Mens API"
DEFAULT_API_DESCRIPTION = "API for Clarus Mens question answering service"
DEFAULT_LICENSE_NAME = "Apache License 2.0"
DEFAULT_LICENSE_URL = "https://www.apache.org/licenses/LICENSE-2.0"
DEFAULT_API_VERSION = "v0"

_URL_ADAPTER = TypeAdapter(AnyUrl)


class ApiInfoError(ConfigurationError):
    """Raised when configured API metadata is invalid."""

    pass


class KeyLookup(Protocol):
    """Read-only configuration lookup."""

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]: ...


@dataclass(frozen=True)
class FieldRule:
    """One descriptor field: where it comes from and how it is checked."""

    name: str
    key: str
    default: Optional[str] = None
    is_uri: bool = False

    def sources(self, configuration: KeyLookup) -> Tuple[Callable[[], Optional[str]], ...]:
        return (
            lambda: configuration.get(self.key),
            lambda: self.default,
        )


API_INFO_FIELDS: Tuple[FieldRule, ...] = (
    FieldRule("title", "ApiInfo:Name", DEFAULT_API_NAME),
    FieldRule("description", "ApiInfo:Description", DEFAULT_API_DESCRIPTION),
    FieldRule("contact_name", "ApiInfo:Contact:Name"),
    FieldRule("contact_email", "ApiInfo:Contact:Email"),
    FieldRule("license_name", "ApiInfo:License:Name", DEFAULT_LICENSE_NAME),
    FieldRule("license_url", "ApiInfo:License:Url", DEFAULT_LICENSE_URL, is_uri=True),
    FieldRule("terms_of_service", "ApiInfo:TermsOfService", is_uri=True),
)


@dataclass(frozen=True)
class ContactInfo:
    name: Optional[str] = None
    email: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.name or self.email)


@dataclass(frozen=True)
class LicenseInfo:
    name: str
    url: str


@dataclass(frozen=True)
class ApiMetadata:
    """Documentation descriptor for one documentation-generation pass."""

    title: str
    version: str
    description: str
    license: LicenseInfo
    contact: ContactInfo = field(default_factory=ContactInfo)
    terms_of_service: Optional[str] = None

    def to_openapi_info(self) -> Dict[str, Any]:
        """Render the OpenAPI ``info`` object, leaving out absent fields."""
        info: Dict[str, Any] = {
            "title": self.title,
            "version": self.version,
            "description": self.description,
        }
        if self.terms_of_service:
            info["termsOfService"] = self.terms_of_service
        if not self.contact.is_empty():
            info["contact"] = {
                key: value
                for key, value in (("name", self.contact.name), ("email", self.contact.email))
                if value
            }
        info["license"] = {"name": self.license.name, "url": self.license.url}
        return info


def _validate_uri(rule: FieldRule, value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise ApiInfoError(f"Invalid URI for {rule.key}: {value!r} ({e.errors()[0]['msg']})")
    return value


def resolve_field(rule: FieldRule, configuration: KeyLookup) -> Optional[str]:
    """
    Resolve one field through its ordered sources.

    Empty and whitespace-only values count as absent.

    Raises:
        ApiInfoError: If a resolved URI field is not a valid absolute URL
    """
    for source in rule.sources(configuration):
        value = source()
        if value is not None and value.strip():
            value = value.strip()
            return _validate_uri(rule, value) if rule.is_uri else value
    return None


class ApiMetadataBuilder:
    """
    Builds ``ApiMetadata`` from configuration and the display version.

    Stateless apart from its collaborators; ``build()`` may be called again to
    rebuild the descriptor.
    """

    def __init__(self, configuration: KeyLookup, fields: Tuple[FieldRule, ...] = API_INFO_FIELDS):
        self._configuration = configuration
        self._fields = fields

    def resolve(self) -> Dict[str, Optional[str]]:
        """Resolve every field in the table, keyed by field name."""
        return {rule.name: resolve_field(rule, self._configuration) for rule in self._fields}

    def build(self, display_version: str) -> ApiMetadata:
        """
        Build the descriptor.

        Args:
            display_version: Resolved display version, never configurable

        Raises:
            ApiInfoError: If configured metadata is invalid
        """
        values = self.resolve()
        metadata = ApiMetadata(
            title=values["title"],
            version=display_version,
            description=values["description"],
            contact=ContactInfo(name=values["contact_name"], email=values["contact_email"]),
            license=LicenseInfo(name=values["license_name"], url=values["license_url"]),
            terms_of_service=values["terms_of_service"],
        )
        logger.debug(f"Built API metadata: {metadata.title} {metadata.version}")
        return metadata


def get_api_version(configuration: KeyLookup) -> str:
    """Name of the OpenAPI document, from ``ApiVersion``."""
    value = configuration.get("ApiVersion")
    return value.strip() if value and value.strip() else DEFAULT_API_VERSION


__all__ = [
    "ApiMetadata",
    "ApiMetadataBuilder",
    "ApiInfoError",
    "ContactInfo",
    "LicenseInfo",
    "FieldRule",
    "API_INFO_FIELDS",
    "resolve_field",
    "get_api_version",
    "DEFAULT_API_NAME",
    "DEFAULT_API_DESCRIPTION",
    "DEFAULT_LICENSE_NAME",
    "DEFAULT_LICENSE_URL",
]
