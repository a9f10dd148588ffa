"""Run the resolved handler once, off the event loop."""

import asyncio
import json
from typing import Any

from fastapi.encoders import jsonable_encoder

from src.errors import InvocationError, RunnerError
from src.events.models import EventEnvelope
from src.handlers.registry import HandlerDescriptor
from src.runtime.context import InvocationContext


async def invoke_handler(
    descriptor: HandlerDescriptor, event: EventEnvelope, context: InvocationContext
) -> Any:
    """Call ``handler.handle(event, context)`` in a worker thread.

    Any exception from the handler surfaces as InvocationError.
    """
    try:
        return await asyncio.to_thread(descriptor.handler.handle, event, context)
    except InvocationError:
        raise
    except RunnerError as e:
        raise InvocationError(str(e)) from e
    except Exception as e:
        raise InvocationError(f"{type(e).__name__}: {e}") from e


def encode_result(result: Any) -> Any:
    """Convert a handler result into JSON-compatible data.

    NaN and Infinity are rejected here, as the response renderer would.
    """
    try:
        encoded = jsonable_encoder(result)
        json.dumps(encoded, allow_nan=False)
        return encoded
    except (TypeError, ValueError) as e:
        raise InvocationError(
            f"Handler returned a value that cannot be serialized: {type(result).__name__}"
        ) from e
