"""
Unit tests for the response envelope.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

import pytest
from pydantic import BaseModel, Field

from clarus_mens.envelope import (
    JSON_MEDIA_TYPE,
    EnvelopeSerializationError,
    JsonSafeResponse,
    json_safe_ok,
    json_safe_with_status,
    serialize_payload,
)
from clarus_mens.models import LinksInfo, QuestionAnswerResponse, SemVerInfo


@dataclass
class AnswerRecord:
    question: str
    processed_at: datetime


class PlainAnswer(BaseModel):
    question: str
    processed_at: datetime
    source_url: str = Field("s", serialization_alias="source")


class AnswerBatch(BaseModel):
    batch_id: int
    answer_records: List[AnswerRecord]


@pytest.fixture
def answer_payload():
    return QuestionAnswerResponse(
        question="hi",
        answer="hello",
        processed_at=datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


class TestSerializePayload:
    """Test JSON text produced for payloads."""

    def test_model_fields_are_lower_camel_case(self, answer_payload):
        data = json.loads(serialize_payload(answer_payload))

        assert list(data) == ["question", "answer", "processedAt"]
        assert data["processedAt"] == "2025-01-02T03:04:05Z"

    def test_compact_formatting(self, answer_payload):
        text = serialize_payload(answer_payload)

        assert "\n" not in text
        assert ": " not in text
        assert text.startswith('{"question":"hi","answer":"hello"')

    def test_nested_model_names(self):
        data = json.loads(serialize_payload(SemVerInfo(major=1, minor=2, patch=3, pre_release="beta")))

        assert data == {
            "major": 1,
            "minor": 2,
            "patch": 3,
            "preRelease": "beta",
            "buildMetadata": "",
            "isPreRelease": False,
        }

    def test_explicit_alias_kept(self):
        links = LinksInfo(documentation="/swagger", openapi_spec="/openapi/v0.json", health="/health", source="s")

        assert "openapi_spec" in json.loads(serialize_payload(links))

    def test_dataclass_fields_are_lower_camel_case(self):
        payload = AnswerRecord("hi", datetime(2025, 1, 2, tzinfo=timezone.utc))

        data = json.loads(serialize_payload(payload))

        assert data == {"question": "hi", "processedAt": "2025-01-02T00:00:00Z"}

    def test_plain_model_fields_are_lower_camel_case(self):
        payload = PlainAnswer(question="hi", processed_at=datetime(2025, 1, 2, tzinfo=timezone.utc))

        data = json.loads(serialize_payload(payload))

        assert list(data) == ["question", "processedAt", "source"]

    def test_nested_structures_renamed(self):
        record = AnswerRecord("hi", datetime(2025, 1, 2, tzinfo=timezone.utc))
        payload = {"batch_info": AnswerBatch(batch_id=7, answer_records=[record])}

        data = json.loads(serialize_payload(payload))

        assert data == {
            "batch_info": {
                "batchId": 7,
                "answerRecords": [{"question": "hi", "processedAt": "2025-01-02T00:00:00Z"}],
            }
        }

    def test_dict_keys_unchanged(self):
        assert serialize_payload({"snake_case": 1, "camelCase": 2}) == '{"snake_case":1,"camelCase":2}'

    def test_unicode_kept(self):
        assert serialize_payload({"answer": "Grüße"}) == '{"answer":"Grüße"}'

    def test_non_serializable_payload(self):
        with pytest.raises(EnvelopeSerializationError, match="object"):
            serialize_payload({"value": object()})

    def test_nan_rejected(self):
        with pytest.raises(EnvelopeSerializationError):
            serialize_payload({"value": float("nan")})


class TestJsonSafeResponses:
    """Test the response objects built by the envelope."""

    def test_ok_response(self, answer_payload):
        response = json_safe_ok(answer_payload)

        assert isinstance(response, JsonSafeResponse)
        assert response.status_code == 200
        assert response.media_type == JSON_MEDIA_TYPE
        assert response.headers["content-type"] == "application/json"
        assert json.loads(response.body)["answer"] == "hello"

    def test_status_variant_has_identical_body(self, answer_payload):
        ok = json_safe_ok(answer_payload)
        bad_request = json_safe_with_status(answer_payload, 400)

        assert bad_request.status_code == 400
        assert bad_request.body == ok.body
        assert bad_request.headers["content-type"] == "application/json"

    def test_content_length_matches_utf8_body(self):
        response = json_safe_ok({"answer": "Grüße"})

        assert int(response.headers["content-length"]) == len(response.body)

    def test_serialization_failure_propagates(self):
        with pytest.raises(EnvelopeSerializationError):
            json_safe_with_status({"value": {1, object()}}, 200)

    def test_response_class_renders_objects(self, answer_payload):
        response = JsonSafeResponse(content=answer_payload)

        assert json.loads(response.body)["processedAt"] == "2025-01-02T03:04:05Z"
