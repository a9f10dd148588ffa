"""Structured JSON logging for the runner.

Logs go to stdout as JSON lines, optionally also to LOG_FILE.
Function output written through the invocation context lands on the
``lambda_runner.function`` child logger, so runner and handler lines
share one stream and one format.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from src.config.settings import get_settings

RUNNER_LOGGER = "lambda_runner"
FUNCTION_LOGGER = "lambda_runner.function"

# Invocation-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or request_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={"log_data": ...}`
        if hasattr(record, "log_data"):
            log_entry.update(record.log_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the runner logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(RUNNER_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_logger() -> logging.Logger:
    return logging.getLogger(RUNNER_LOGGER)


def get_function_logger() -> logging.Logger:
    return logging.getLogger(FUNCTION_LOGGER)


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestTimer:
    """Context manager to measure invocation latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
