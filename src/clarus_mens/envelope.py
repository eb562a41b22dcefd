"""Response envelope for all API output.

Every handler result is serialized to compact JSON text here and sent as a
plain text response declared as ``application/json``. Structured JSON response
classes are never used, so serialization is identical for every endpoint and
does not depend on a framework writer path.

Structured field names (pydantic models and dataclasses) are sent in lower
camel case; explicit aliases win. Plain dict keys are sent unchanged.
"""

import dataclasses
import json
from typing import Any, Mapping

from fastapi import Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError, to_jsonable_python

JSON_MEDIA_TYPE = "application/json"


class EnvelopeSerializationError(Exception):
    """Raised when a payload cannot be serialized to JSON."""

    pass


class CamelModel(BaseModel):
    """Base for payload models, serialized with lower camel case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JsonSafeResponse(Response):
    """Text response carrying pre-serialized JSON."""

    media_type = JSON_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        # Pre-serialized text passes through; anything else goes through the
        # envelope so this class is safe as the app's default response class.
        if isinstance(content, (str, bytes)):
            return super().render(content)
        return serialize_payload(content).encode("utf-8")


def _apply_field_names(value: Any) -> Any:
    """Replace models and dataclasses with dicts keyed by wire field names."""
    if isinstance(value, BaseModel):
        return {
            info.serialization_alias or info.alias or to_camel(name): _apply_field_names(
                getattr(value, name)
            )
            for name, info in type(value).model_fields.items()
            if not info.exclude
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            to_camel(f.name): _apply_field_names(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {key: _apply_field_names(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_apply_field_names(item) for item in value]
    return value


def serialize_payload(payload: Any) -> str:
    """
    Serialize a payload to compact JSON text.

    Model and dataclass field names are rendered in lower camel case, dict
    keys as given.

    Raises:
        EnvelopeSerializationError: If the payload holds values JSON cannot
            represent
    """
    try:
        data = to_jsonable_python(_apply_field_names(payload), by_alias=True)
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EnvelopeSerializationError(
            f"Cannot serialize {type(payload).__name__} payload: {e}"
        ) from e


def json_safe_with_status(payload: Any, status_code: int) -> JsonSafeResponse:
    """Serialize ``payload`` and return it with the given status code."""
    return JsonSafeResponse(content=serialize_payload(payload), status_code=status_code)


def json_safe_ok(payload: Any) -> JsonSafeResponse:
    """Serialize ``payload`` and return it with status 200."""
    return json_safe_with_status(payload, 200)


__all__ = [
    "CamelModel",
    "JsonSafeResponse",
    "EnvelopeSerializationError",
    "serialize_payload",
    "json_safe_ok",
    "json_safe_with_status",
    "JSON_MEDIA_TYPE",
]
