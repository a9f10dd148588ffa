"""Tests for src/config/settings.py: Settings defaults and env overrides."""

from src.config.settings import DEFAULT_PORT, get_settings


class TestSettings:

    def test_defaults(self, override_settings):
        override_settings()
        s = get_settings()
        assert s.port == DEFAULT_PORT == 8080
        assert s.host == "127.0.0.1"
        assert s.function_name == "local-function"
        assert s.remaining_time_ms == 300_000
        assert s.passthrough_string_results is False
        assert s.log_level == "INFO"

    def test_env_override(self, override_settings):
        override_settings(
            PORT="1234",
            FUNCTION_NAME="orders",
            PASSTHROUGH_STRING_RESULTS="true",
        )
        s = get_settings()
        assert s.port == 1234
        assert s.function_name == "orders"
        assert s.passthrough_string_results is True

    def test_function_arn(self, override_settings):
        override_settings(FUNCTION_NAME="orders", AWS_REGION="eu-west-1")
        s = get_settings()
        assert s.function_arn == "arn:aws:lambda:eu-west-1:000000000000:function:orders"

    def test_cached(self, override_settings):
        override_settings()
        assert get_settings() is get_settings()
