"""Shared fixtures for the Local Lambda Runner test suite."""

from pathlib import Path

import pytest

from src.config.settings import get_settings
from src.handlers.base import RequestHandler

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    """Read a sample event body from tests/fixtures."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class RecordingHandler(RequestHandler):
    """Records every (event, context) it receives and returns a fixed reply."""

    def __init__(self, reply="Received event"):
        self.reply = reply
        self.calls = []

    def handle(self, event, context):
        self.calls.append((event, context))
        return self.reply


class FailingHandler(RequestHandler):
    def handle(self, event, context):
        raise RuntimeError("boom")


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def failing_handler() -> FailingHandler:
    return FailingHandler()


@pytest.fixture
def load_event():
    """Return the reader for sample event bodies in tests/fixtures."""
    return read_fixture


@pytest.fixture
def dynamodb_event_body() -> str:
    return read_fixture("dynamodb-event.json")


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(PORT="9000", PASSTHROUGH_STRING_RESULTS="true")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
