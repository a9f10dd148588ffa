"""Event envelope shapes passed to handlers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from src.errors import InvocationError


class EventShape(str, Enum):
    GENERIC_MAP = "generic_map"
    DYNAMODB = "dynamodb"
    SNS = "sns"
    S3 = "s3"
    SQS = "sqs"

    @property
    def is_record_list(self) -> bool:
        return self is not EventShape.GENERIC_MAP


@dataclass
class RecordListEvent:
    """A named list of records: stream, topic, bucket and queue events.

    Records are kept as decoded JSON objects, field for field.
    """

    shape: EventShape
    records: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def first_record(self) -> dict[str, Any]:
        """Return records[0], failing clearly when the event carries none."""
        if not self.records:
            raise InvocationError(f"{self.shape.value} event contains no records")
        return self.records[0]


# Generic maps are plain dicts (insertion-ordered, as decoded).
EventEnvelope = Union[dict[str, Any], RecordListEvent]
