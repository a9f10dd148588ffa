"""Integration tests for src/main.py: HTTP adapter via ASGI transport."""

import json

import httpx
import pytest

from src.events.models import EventShape, RecordListEvent
from src.handlers.registry import describe, resolve
from src.main import create_app
from src.samples.handlers import EchoHandler


def _client(app) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def make_client(override_settings):
    """Build an AsyncClient around a handler instance and event type."""
    override_settings()

    def _make(handler, event_type):
        return _client(create_app(describe(handler, event_type)))

    return _make


class TestLiveness:

    async def test_get_root(self, make_client, recording_handler):
        async with make_client(recording_handler, "DynamodbEvent") as client:
            resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.text == ""
        assert recording_handler.calls == []

    async def test_health(self, make_client, recording_handler):
        async with make_client(recording_handler, "SNSEvent") as client:
            resp = await client.get("/health")
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["event_type"] == "SNSEvent"
        assert "version" in data


class TestRecordListEvents:

    @pytest.mark.parametrize("event_type, fixture, shape", [
        ("DynamodbEvent", "dynamodb-event.json", EventShape.DYNAMODB),
        ("SNSEvent", "sns-event.json", EventShape.SNS),
        ("S3Event", "s3-event.json", EventShape.S3),
        ("SQSEvent", "sqs-event.json", EventShape.SQS),
    ])
    async def test_forwards_to_handler(self, make_client, recording_handler, load_event,
                                       event_type, fixture, shape):
        body = load_event(fixture)
        async with make_client(recording_handler, event_type) as client:
            resp = await client.post("/", content=body)

        assert resp.status_code == 200
        assert resp.json() == "Received event"
        assert len(recording_handler.calls) == 1

        event, context = recording_handler.calls[0]
        assert isinstance(event, RecordListEvent)
        assert event.shape is shape
        assert len(event.records) == 1
        assert event.records[0] == json.loads(body)["Records"][0]
        assert resp.headers["x-request-id"] == context.aws_request_id

    async def test_sample_record_logger(self, override_settings, dynamodb_event_body):
        override_settings()
        app = create_app(resolve("record-logger", "DynamodbEvent"))
        async with _client(app) as client:
            resp = await client.post("/", content=dynamodb_event_body)
        assert resp.status_code == 200
        assert resp.text == '"Received event"'

    async def test_empty_records_fail_clearly(self, override_settings):
        override_settings()
        app = create_app(resolve("record-logger", "S3Event"))
        async with _client(app) as client:
            resp = await client.post("/", content='{"Records": []}')
        assert resp.status_code == 500
        assert "no records" in resp.json()["error"]


class TestGenericMapEvents:

    async def test_ses_subject_round_trip(self, override_settings, load_event):
        override_settings()
        subject = "Test Subject"
        body = load_event("ses-event.json").replace("%%SUBJECT%%", subject)

        app = create_app(resolve("src.samples.handlers:SubjectHandler", "LinkedHashMap"))
        async with _client(app) as client:
            resp = await client.post("/", content=body)

        assert resp.status_code == 200
        assert resp.text == '"' + subject + '"'

    async def test_echo_returns_json_object(self, make_client):
        async with make_client(EchoHandler(), dict) as client:
            resp = await client.post("/", content='{"b": 2, "a": [1, {"c": null}]}')
        assert resp.status_code == 200
        assert resp.json() == {"b": 2, "a": [1, {"c": None}]}
        assert resp.headers["content-type"].startswith("application/json")

    async def test_none_result_is_null(self, make_client):
        async with make_client(lambda event, context: None, "dict") as client:
            resp = await client.post("/", content="{}")
        assert resp.status_code == 200
        assert resp.text == "null"

    async def test_context_metadata(self, override_settings):
        override_settings(FUNCTION_NAME="orders", REMAINING_TIME_MS="1500")
        app = create_app(resolve("context", "dict"))
        async with _client(app) as client:
            resp = await client.post("/", content="{}")
        data = resp.json()
        assert data["function_name"] == "orders"
        assert data["remaining_time_ms"] == 1500
        assert data["request_id"] == resp.headers["x-request-id"]


class TestPassthroughStrings:

    async def test_plain_text_when_enabled(self, override_settings, recording_handler):
        override_settings(PASSTHROUGH_STRING_RESULTS="true")
        app = create_app(describe(recording_handler, "dict"))
        async with _client(app) as client:
            resp = await client.post("/", content="{}")
        assert resp.status_code == 200
        assert resp.text == "Received event"
        assert resp.headers["content-type"].startswith("text/plain")

    async def test_non_strings_still_json(self, override_settings):
        override_settings(PASSTHROUGH_STRING_RESULTS="true")
        app = create_app(describe(lambda event, context: {"ok": True}, "dict"))
        async with _client(app) as client:
            resp = await client.post("/", content="{}")
        assert resp.json() == {"ok": True}


class TestErrors:

    async def test_malformed_body_is_400(self, make_client, recording_handler):
        async with make_client(recording_handler, "DynamodbEvent") as client:
            resp = await client.post("/", content="{not json")
        assert resp.status_code == 400
        assert "Malformed JSON" in resp.json()["error"]
        assert recording_handler.calls == []

    async def test_non_object_body_is_400(self, make_client, recording_handler):
        async with make_client(recording_handler, "dict") as client:
            resp = await client.post("/", content="[1, 2, 3]")
        assert resp.status_code == 400

    async def test_handler_failure_is_500_and_app_keeps_serving(self, make_client, failing_handler):
        async with make_client(failing_handler, "dict") as client:
            resp = await client.post("/", content="{}")
            assert resp.status_code == 500
            assert "boom" in resp.json()["error"]

            assert (await client.get("/")).status_code == 200
            assert (await client.post("/", content="{}")).status_code == 500

    async def test_unserializable_result_is_500(self, make_client):
        async with make_client(lambda event, context: object(), "dict") as client:
            resp = await client.post("/", content="{}")
        assert resp.status_code == 500
        assert "cannot be serialized" in resp.json()["error"]

    async def test_nan_result_is_json_500(self, make_client):
        async with make_client(lambda event, context: float("nan"), "dict") as client:
            resp = await client.post("/", content="{}")
            assert resp.status_code == 500
            assert "cannot be serialized" in resp.json()["error"]
            assert (await client.get("/")).status_code == 200

    async def test_invalid_utf8_body_is_400(self, make_client, recording_handler):
        async with make_client(recording_handler, "dict") as client:
            resp = await client.post("/", content=b'{"a": "\xff\xfe"}')
        assert resp.status_code == 400
        assert resp.json()["error"] == "Request body is not valid UTF-8"
        assert recording_handler.calls == []
