"""Error taxonomy for the runner.

Startup errors (ConfigurationError, StartupError) abort the process.
Per-request errors (DecodeError, InvocationError) become HTTP error responses.
"""


class RunnerError(Exception):
    """Base class for all runner errors."""


class ConfigurationError(RunnerError):
    """Bad or missing handler / event type at startup."""


class StartupError(RunnerError):
    """The listener could not be started (port in use, already running)."""


class DecodeError(RunnerError):
    """The request body could not be decoded into the handler's event shape."""

    status_code = 400


class InvocationError(RunnerError):
    """The handler raised, or its result could not be serialized."""

    status_code = 500
