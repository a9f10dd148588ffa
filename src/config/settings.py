"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_PORT = 8080


class Settings(BaseSettings):
    # Listener
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT

    # Invocation context metadata (placeholders, nothing is enforced locally)
    function_name: str = "local-function"
    function_version: str = "$LATEST"
    memory_limit_mb: int = 128
    remaining_time_ms: int = 300_000  # Reported as-is on every call
    aws_region: str = "us-east-1"

    # Return str results as text/plain instead of a JSON string
    passthrough_string_results: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def function_arn(self) -> str:
        return f"arn:aws:lambda:{self.aws_region}:000000000000:function:{self.function_name}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
