"""Decode raw request bodies into the event shape a handler expects."""

import json
from typing import Any

from src.errors import DecodeError
from src.events.models import EventEnvelope, EventShape, RecordListEvent

RECORDS_KEY = "Records"

# Normalized event type name -> shape. Anything else decodes as a generic map.
_SHAPE_ALIASES: dict[str, EventShape] = {
    "dynamodb": EventShape.DYNAMODB,
    "dynamodbstream": EventShape.DYNAMODB,
    "sns": EventShape.SNS,
    "s3": EventShape.S3,
    "s3notification": EventShape.S3,
    "sqs": EventShape.SQS,
}


def normalize_event_type(name: str) -> str:
    """'com.example.DynamodbEvent' / 'pkg:SNSEvent' / 'sns' -> 'dynamodb' / 'sns' / 'sns'."""
    tail = name.strip().replace(":", ".").rsplit(".", 1)[-1].lower()
    if tail.endswith("event") and tail != "event":
        tail = tail[: -len("event")]
    return tail


def shape_for(event_type_name: str) -> EventShape:
    return _SHAPE_ALIASES.get(normalize_event_type(event_type_name), EventShape.GENERIC_MAP)


def decode(raw_body: str, target_event_type_name: str) -> EventEnvelope:
    """Parse ``raw_body`` into the envelope selected by ``target_event_type_name``.

    Raises:
        DecodeError: malformed JSON, or JSON that does not fit the shape.
    """
    return decode_shape(raw_body, shape_for(target_event_type_name))


def decode_shape(raw_body: str, shape: EventShape) -> EventEnvelope:
    try:
        payload = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON body: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected a JSON object for {shape.value} event, got {type(payload).__name__}"
        )

    if not shape.is_record_list:
        return payload

    return RecordListEvent(shape=shape, records=_extract_records(payload, shape))


def _extract_records(payload: dict[str, Any], shape: EventShape) -> list[dict[str, Any]]:
    records = payload.get(RECORDS_KEY, [])
    if not isinstance(records, list):
        raise DecodeError(f"'{RECORDS_KEY}' must be a list in {shape.value} event")
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise DecodeError(f"{shape.value} record {index} is not a JSON object")
    return records
