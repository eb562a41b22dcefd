"""Response payload models for the HTTP surface."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from .envelope import CamelModel
from .version import VersionService


class LicenseLink(CamelModel):
    name: str
    url: str


class LinksInfo(CamelModel):
    """Links advertised by the root endpoint. Names are fixed, not camel cased."""

    documentation: str
    openapi_spec: str = Field(..., alias="openapi_spec")
    health: str
    source: str


class RootResponse(CamelModel):
    status: str
    name: str
    version: str
    environment: str
    license: LicenseLink
    links: LinksInfo


class QuestionAnswerResponse(CamelModel):
    question: str
    answer: str
    processed_at: datetime


class SemVerInfo(CamelModel):
    major: int
    minor: int
    patch: int
    pre_release: str = ""
    build_metadata: str = ""
    is_pre_release: bool = False


class VersionResponse(CamelModel):
    """
    Version report.

    ``version`` is the ``v``-prefixed SemVer string, ``assemblyVersion`` the
    four-part build version.
    """

    version: str
    sem_ver: SemVerInfo
    assembly_version: str

    @classmethod
    def from_service(cls, version_service: VersionService) -> "VersionResponse":
        return cls.model_validate(version_service.get_version_info())


class HealthResponse(CamelModel):
    status: str
    uptime_seconds: int
    checks: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(CamelModel):
    error: str


class ProblemResponse(CamelModel):
    title: str
    detail: Optional[str] = None
