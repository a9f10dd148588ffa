"""Local Lambda Runner: FastAPI application factory.

Exposes a single resolved handler over HTTP: POST / invokes it with the
request body decoded as its event type, GET / answers liveness probes.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from src.config.settings import Settings, get_settings
from src.errors import DecodeError, InvocationError
from src.events.decoder import decode_shape
from src.handlers.registry import HandlerDescriptor
from src.invocation.handler import encode_result, invoke_handler
from src.logging.structured import RequestTimer, get_logger, request_id_var
from src.runtime.context import InvocationContext

VERSION = "0.1.0"


def create_app(descriptor: HandlerDescriptor, settings: Settings | None = None) -> FastAPI:
    """Build the HTTP adapter around one resolved handler."""
    settings = settings or get_settings()
    logger = get_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Runner listening",
            extra={"log_data": {
                "handler": descriptor.handler_type_name,
                "event_type": descriptor.event_type_name,
                "shape": descriptor.shape.value,
            }},
        )
        yield
        logger.info("Runner stopped")

    app = FastAPI(
        title="Local Lambda Runner",
        description="Invoke a function handler locally over HTTP",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.descriptor = descriptor

    @app.exception_handler(DecodeError)
    async def decode_error_handler(request: Request, exc: DecodeError):
        logger.warning("Event decode failed", extra={"log_data": {"error": str(exc)}})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(InvocationError)
    async def invocation_error_handler(request: Request, exc: InvocationError):
        logger.error(
            "Invocation failed",
            exc_info=exc.__cause__ or exc,
            extra={"log_data": {"handler": descriptor.handler_type_name, "error": str(exc)}},
        )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.get("/")
    async def liveness():
        return PlainTextResponse("")

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "version": VERSION,
            "handler": descriptor.handler_type_name,
            "event_type": descriptor.event_type_name,
        }

    @app.post("/")
    async def invoke(request: Request) -> Response:
        """Pipeline: Decode -> Context -> Invoke -> Encode -> Log"""
        try:
            raw_body = (await request.body()).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Request body is not valid UTF-8") from e
        event = decode_shape(raw_body, descriptor.shape)

        context = InvocationContext.create(settings=settings)
        request_id_var.set(context.aws_request_id)

        with RequestTimer() as timer:
            result = await invoke_handler(descriptor, event, context)

        logger.info(
            "Invocation completed",
            extra={"log_data": {
                "handler": descriptor.handler_type_name,
                "shape": descriptor.shape.value,
                "latency_ms": timer.elapsed_ms,
            }},
        )

        headers = {"X-Request-Id": context.aws_request_id}
        if isinstance(result, str) and settings.passthrough_string_results:
            return PlainTextResponse(result, headers=headers)
        return JSONResponse(content=encode_result(result), headers=headers)

    return app
