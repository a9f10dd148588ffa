"""Handler contract: a single ``handle(event, context)`` method."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from src.events.models import EventEnvelope
from src.runtime.context import InvocationContext


class RequestHandler(ABC):
    """Base class for handler implementations.

    Subclassing is optional: the resolver accepts any object with a
    callable ``handle`` attribute.
    """

    @abstractmethod
    def handle(self, event: EventEnvelope, context: InvocationContext) -> Any:
        """Process one event and return the invocation result.

        Args:
            event: A dict for generic-map events, a RecordListEvent otherwise.
            context: Per-invocation metadata and logger.

        Returns:
            Any JSON-serializable value.
        """
        ...


class FunctionHandler(RequestHandler):
    """Adapts a plain ``fn(event, context)`` entry point to the handler contract."""

    def __init__(self, fn: Callable[[Any, Any], Any]):
        self.fn = fn

    def handle(self, event, context):
        return self.fn(event, context)

    def __repr__(self) -> str:
        return f"FunctionHandler({getattr(self.fn, '__qualname__', self.fn)!r})"
