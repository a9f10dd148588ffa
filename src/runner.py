"""Listener lifecycle and process entry point.

    lambda-runner src.samples.handlers:EchoHandler dict --port 8080

STOPPED -> STARTING -> LISTENING -> STOPPED. uvicorn serves the app on a
background thread; the socket is bound here so bind failures surface as
StartupError instead of a uvicorn exit.
"""

import argparse
import socket
import threading
import time
from enum import Enum
from typing import Any

import uvicorn

from src.config.settings import get_settings
from src.errors import ConfigurationError, StartupError
from src.handlers.registry import HandlerDescriptor, describe, list_handlers, resolve
from src.logging.structured import get_logger, setup_logging
from src.main import create_app

STARTUP_TIMEOUT_SECONDS = 10.0


class RunnerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    LISTENING = "listening"


class LambdaRunner:
    """Serves one HandlerDescriptor on a single HTTP listener."""

    def __init__(self, descriptor: HandlerDescriptor, host: str | None = None):
        self.descriptor = descriptor
        self.host = host
        self.state = RunnerState.STOPPED
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._socket: socket.socket | None = None

    @property
    def port(self) -> int | None:
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    def start(self, port: int | None = None) -> "LambdaRunner":
        """Bind the port and serve until stop() is called.

        Port: explicit ``port``, else settings.port (PORT env, default 8080).
        """
        with self._lock:
            if self.state is not RunnerState.STOPPED:
                raise StartupError(f"Runner is already {self.state.value}")
            self.state = RunnerState.STARTING

            settings = get_settings()
            host = self.host or settings.host
            if port is None:
                port = settings.port

            try:
                self._socket = _bind_socket(host, port)
                self._serve()
            except Exception:
                self._release()
                raise

            self.state = RunnerState.LISTENING
            get_logger().info(
                "Runner started",
                extra={"log_data": {"host": host, "port": self.port}},
            )
            return self

    def _serve(self) -> None:
        config = uvicorn.Config(
            create_app(self.descriptor),
            log_config=None,
            log_level="warning",
            lifespan="on",
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [self._socket]},
            name="lambda-runner",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + STARTUP_TIMEOUT_SECONDS
        while not self._server.started:
            if not self._thread.is_alive():
                raise StartupError("Server exited during startup")
            if time.monotonic() > deadline:
                raise StartupError("Server did not start in time")
            time.sleep(0.01)

    def stop(self) -> None:
        """Stop listening and release the port. No-op when already stopped."""
        with self._lock:
            if self.state is RunnerState.STOPPED:
                return
            self._release()
            get_logger().info("Runner shut down")

    def _release(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join()
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None
        self.state = RunnerState.STOPPED

    def wait(self) -> None:
        """Block until the server thread exits."""
        thread = self._thread
        if thread is not None:
            thread.join()


def _bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        raise StartupError(f"Cannot bind {host}:{port}: {e}") from e
    sock.set_inheritable(True)
    return sock


# --- Process-wide runner ---

_runner: LambdaRunner | None = None


def start_server(handler: Any, event_type: str | type, port: int | None = None) -> LambdaRunner:
    """Serve an already-constructed handler on the process runner."""
    return _start(describe(handler, event_type), port)


def stop_server() -> None:
    """Stop the process runner, if any. Safe to call repeatedly."""
    global _runner
    if _runner is not None:
        _runner.stop()
        _runner = None


def _start(descriptor: HandlerDescriptor, port: int | None, host: str | None = None) -> LambdaRunner:
    global _runner
    if _runner is not None and _runner.state is not RunnerState.STOPPED:
        raise StartupError("A runner is already active in this process")
    setup_logging()
    runner = LambdaRunner(descriptor, host=host)
    runner.start(port)
    _runner = runner
    return runner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lambda-runner",
        description="Invoke a function handler locally over HTTP",
        epilog=f"Registered handlers: {', '.join(list_handlers()) or '(none)'}",
    )
    parser.add_argument("handler", nargs="?", help="registered name or package.module:Class")
    parser.add_argument("event_type", nargs="?", help="event type, e.g. DynamodbEvent, SNSEvent, S3Event, dict")
    parser.add_argument("--port", type=int, default=None, help="listener port (default: $PORT or 8080)")
    parser.add_argument("--host", default=None, help="listener address (default: $HOST or 127.0.0.1)")
    return parser


def run_from_args(argv: list[str] | None = None) -> LambdaRunner:
    """Resolve the handler named on the command line and start serving it.

    Raises:
        ConfigurationError: missing or unresolvable arguments.
        StartupError: the listener could not be started.
    """
    import src.samples.handlers  # noqa: F401  registers the sample handlers

    args = build_parser().parse_args(argv)
    if not args.handler or not args.event_type:
        raise ConfigurationError("Usage: lambda-runner HANDLER EVENT_TYPE [--port PORT]")

    descriptor = resolve(args.handler, args.event_type)
    return _start(descriptor, args.port, host=args.host)


def main(argv: list[str] | None = None) -> int:
    try:
        runner = run_from_args(argv)
    except (ConfigurationError, StartupError) as e:
        setup_logging()
        get_logger().error("Runner failed to start", extra={"log_data": {"error": str(e)}})
        return 1

    try:
        runner.wait()
    except KeyboardInterrupt:
        pass
    finally:
        stop_server()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
