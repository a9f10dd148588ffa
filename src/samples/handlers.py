"""Sample handlers for trying the runner from the command line.

    lambda-runner echo dict
    lambda-runner record-logger DynamodbEvent
    lambda-runner src.samples.handlers:SubjectHandler dict
"""

from typing import Any

from src.events.models import RecordListEvent
from src.handlers.base import RequestHandler
from src.handlers.registry import register_handler

RECEIVED = "Received event"


@register_handler("echo")
class EchoHandler(RequestHandler):
    """Returns the decoded event unchanged."""

    def handle(self, event, context):
        context.logger.log(f"echo {type(event).__name__}")
        return event


@register_handler("record-logger")
class RecordLoggerHandler(RequestHandler):
    """Logs the first record of a stream, topic, bucket or queue event."""

    def handle(self, event: RecordListEvent, context):
        record = event.first_record()
        context.logger.log(record)
        return RECEIVED


@register_handler("subject")
class SubjectHandler(RequestHandler):
    """Returns the first ``subject`` field found anywhere in the event."""

    def handle(self, event: dict, context):
        return find_value(event, "subject")


@register_handler("context")
def describe_context(event, context) -> dict:
    return {
        "request_id": context.aws_request_id,
        "function_name": context.function_name,
        "memory_limit_in_mb": context.memory_limit_in_mb,
        "remaining_time_ms": context.get_remaining_time_in_millis(),
    }


def find_value(node: Any, key: str) -> Any:
    """Depth-first search for ``key`` through nested dicts and lists."""
    if isinstance(node, dict):
        if key in node:
            return node[key]
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = find_value(child, key)
        if found is not None:
            return found
    return None
