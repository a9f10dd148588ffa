"""Invocation context handed to the handler on every call."""

from dataclasses import dataclass, field

from src.config.settings import Settings, get_settings
from src.logging.structured import generate_request_id, get_function_logger


class LambdaLogger:
    """Write-only log capability; appends to the process-wide function log."""

    def __init__(self, request_id: str):
        self._request_id = request_id
        self._logger = get_function_logger()

    def log(self, message) -> None:
        self._logger.info(str(message), extra={"request_id": self._request_id})


@dataclass
class InvocationContext:
    aws_request_id: str
    function_name: str
    function_version: str
    invoked_function_arn: str
    memory_limit_in_mb: int
    log_group_name: str
    log_stream_name: str
    remaining_time_ms: int
    logger: LambdaLogger = field(repr=False)

    def get_remaining_time_in_millis(self) -> int:
        # No execution budget exists locally; the configured value is reported as-is.
        return self.remaining_time_ms

    @classmethod
    def create(cls, request_id: str | None = None, settings: Settings | None = None) -> "InvocationContext":
        """Build a fresh context for a single invocation."""
        settings = settings or get_settings()
        request_id = request_id or generate_request_id()
        return cls(
            aws_request_id=request_id,
            function_name=settings.function_name,
            function_version=settings.function_version,
            invoked_function_arn=settings.function_arn,
            memory_limit_in_mb=settings.memory_limit_mb,
            log_group_name=f"/aws/lambda/{settings.function_name}",
            log_stream_name="local",
            remaining_time_ms=settings.remaining_time_ms,
            logger=LambdaLogger(request_id),
        )
