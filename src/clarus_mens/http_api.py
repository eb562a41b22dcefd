"""
HTTP API for Clarus Mens

This module builds the FastAPI application exposing the service endpoints.
Version state and API metadata are resolved once in ``create_app`` and
captured by the route handlers; nothing is recomputed per request.

Endpoints:
- /              root status, name, display version and links
- /api/question  keyword-based question answering stub
- /api/version   SemVer version report
- /health        aggregated health checks
- /openapi/{ApiVersion}.json  OpenAPI document built from the API metadata
- /swagger       Swagger UI for the OpenAPI document

Every response body, including errors and the OpenAPI document, goes through
the response envelope in ``clarus_mens.envelope``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api_info import ApiMetadata, ApiMetadataBuilder, get_api_version
from .config import AppConfiguration, ConfigurationError, Settings
from .envelope import (
    EnvelopeSerializationError,
    JsonSafeResponse,
    json_safe_ok,
    json_safe_with_status,
)
from .environment import HostEnvironment, StaticEnvironment
from .health import HealthCheckService, HealthStatus
from .models import (
    ErrorResponse,
    HealthResponse,
    LicenseLink,
    LinksInfo,
    ProblemResponse,
    QuestionAnswerResponse,
    RootResponse,
    VersionResponse,
)
from .questions import MAX_QUESTION_LENGTH, QuestionService, SimpleQuestionService
from .version import VersionService

logger = logging.getLogger(__name__)

DOCS_PATH = "/swagger"
HEALTH_PATH = "/health"

# Documented on every operation that does not declare its own
DEFAULT_OPERATION_RESPONSES = {
    "400": "Bad Request - The request was malformed or contained invalid parameters.",
    "500": "Server Error - An unexpected server error occurred.",
}


def build_openapi_schema(app: FastAPI, metadata: ApiMetadata) -> Dict[str, Any]:
    """
    Generate the OpenAPI document with ``metadata`` as its info block.

    Validation errors are answered with 400, so the framework's generated 422
    responses are replaced by the default 400/500 descriptions.
    """
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(
        title=metadata.title,
        version=metadata.version,
        description=metadata.description,
        routes=app.routes,
    )
    schema["info"] = metadata.to_openapi_info()

    for path_item in schema.get("paths", {}).values():
        for operation in path_item.values():
            responses = operation.setdefault("responses", {})
            responses.pop("422", None)
            for code, description in DEFAULT_OPERATION_RESPONSES.items():
                responses.setdefault(code, {"description": description})

    app.openapi_schema = schema
    return schema


def create_app(
    settings: Optional[Settings] = None,
    configuration: Optional[AppConfiguration] = None,
    environment: Optional[HostEnvironment] = None,
    version_service: Optional[VersionService] = None,
    question_service: Optional[QuestionService] = None,
    health_service: Optional[HealthCheckService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Collaborators not supplied are created from the process environment.

    Raises:
        ConfigurationError: If settings or API metadata configuration are
            invalid; the service refuses to start
    """
    if settings is None:
        settings = Settings.load_runtime_config()
        errors = settings.validate()
        if errors:
            raise ConfigurationError("Invalid settings: " + "; ".join(errors))
    if environment is None:
        environment = StaticEnvironment(settings.environment)
    if configuration is None:
        configuration = AppConfiguration.load(settings.config_dir, environment.environment_name)
    if version_service is None:
        version_service = VersionService.from_settings(settings, environment)
    if question_service is None:
        question_service = SimpleQuestionService()
    if health_service is None:
        health_service = HealthCheckService(cache_ttl=settings.health_cache_ttl)

    display_version = version_service.get_display_version()
    metadata = ApiMetadataBuilder(configuration).build(display_version)
    openapi_path = f"/openapi/{get_api_version(configuration)}.json"

    app = FastAPI(
        title=metadata.title,
        description=metadata.description,
        version=metadata.version,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        default_response_class=JsonSafeResponse,
    )
    app.openapi = lambda: build_openapi_schema(app, metadata)

    app.state.settings = settings
    app.state.version_service = version_service
    app.state.api_metadata = metadata
    app.state.health_service = health_service

    @app.get("/", responses={200: {"model": RootResponse}})
    async def root():
        """Essential API information and service status."""
        report = await health_service.check_health()
        response = RootResponse(
            status="operational" if report.status == HealthStatus.HEALTHY else "degraded",
            name=metadata.title,
            version=display_version,
            environment=environment.environment_name,
            license=LicenseLink(name=metadata.license.name, url=metadata.license.url),
            links=LinksInfo(
                documentation=DOCS_PATH,
                openapi_spec=openapi_path,
                health=HEALTH_PATH,
                source=settings.source_url,
            ),
        )
        return json_safe_ok(response)

    @app.get(
        "/api/question",
        name="GetAnswer",
        summary="Get an answer to a question",
        description="Provides a short answer to a user's question",
        responses={200: {"model": QuestionAnswerResponse}, 400: {"model": ErrorResponse}},
    )
    async def get_answer(
        query: Optional[str] = Query(
            None,
            description="The question to be answered",
            examples=["What is your name?"],
        ),
    ):
        if query is None or not query.strip():
            return json_safe_with_status(ErrorResponse(error="Question cannot be empty"), 400)

        if len(query) > MAX_QUESTION_LENGTH:
            return json_safe_with_status(
                ErrorResponse(
                    error=f"Question is too long. Maximum length is {MAX_QUESTION_LENGTH} characters."
                ),
                400,
            )

        try:
            answer = await question_service.get_answer(query)
        except Exception as e:
            logger.error(f"Error processing question: {e}", exc_info=True)
            return json_safe_with_status(
                ProblemResponse(
                    title="Error processing question",
                    detail="An unexpected error occurred while processing your question.",
                ),
                500,
            )

        return json_safe_ok(
            QuestionAnswerResponse(
                question=query,
                answer=answer,
                processed_at=datetime.now(timezone.utc),
            )
        )

    @app.get(
        "/api/version",
        name="GetVersion",
        summary="Get API version information",
        description="Returns detailed version information of the API following SemVer 2.0.0",
        responses={200: {"model": VersionResponse}},
    )
    async def get_version():
        return json_safe_ok(VersionResponse.from_service(version_service))

    @app.get(HEALTH_PATH, responses={200: {"model": HealthResponse}, 503: {"model": HealthResponse}})
    async def health_check():
        """Aggregated health status; 503 when unhealthy."""
        report = await health_service.check_health()
        response = HealthResponse(
            status=report.status.value,
            uptime_seconds=report.uptime_seconds,
            checks={name: status.value for name, status in report.checks.items()},
        )
        status_code = 503 if report.status == HealthStatus.UNHEALTHY else 200
        return json_safe_with_status(response, status_code)

    @app.get(openapi_path, include_in_schema=False)
    async def openapi_document():
        return json_safe_ok(app.openapi())

    @app.get(DOCS_PATH, include_in_schema=False)
    async def swagger_ui():
        return get_swagger_ui_html(
            openapi_url=openapi_path,
            title=f"{metadata.title} {display_version}",
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Request validation failed for {request.url.path}: {exc.errors()}")
        detail = "; ".join(str(error.get("msg", "")) for error in exc.errors())
        return json_safe_with_status(ProblemResponse(title="Invalid request", detail=detail), 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = json_safe_with_status(ProblemResponse(title=str(exc.detail)), exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(EnvelopeSerializationError)
    async def serialization_exception_handler(request: Request, exc: EnvelopeSerializationError):
        logger.error(f"Response serialization failed for {request.url.path}: {exc}")
        return json_safe_with_status(
            ProblemResponse(
                title="Response serialization failed",
                detail="The response could not be serialized.",
            ),
            500,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return json_safe_with_status(
            ProblemResponse(
                title="Internal server error",
                detail="An unexpected error occurred.",
            ),
            500,
        )

    @app.on_event("startup")
    async def startup_event():
        summary = settings.get_startup_summary()
        logger.info(f"Environment: {environment.environment_name}")
        logger.info(f"Settings directory: {summary['config_dir']}")
        logger.info(f"OpenAPI document: {openapi_path}")
        logger.info(f"Application started. Version: {display_version}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Clarus Mens API shutting down")

    return app


__all__ = ["create_app", "build_openapi_schema", "DOCS_PATH", "HEALTH_PATH"]
