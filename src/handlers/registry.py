"""Handler resolution: registered names first, then Python import paths."""

import importlib
import inspect
from dataclasses import dataclass
from typing import Any

from src.errors import ConfigurationError
from src.events.decoder import shape_for
from src.events.models import EventShape
from src.handlers.base import FunctionHandler

_handlers: dict[str, Any] = {}


@dataclass(frozen=True)
class HandlerDescriptor:
    handler_type_name: str
    event_type_name: str
    shape: EventShape
    handler: Any


def register_handler(name: str):
    """Decorator: make a handler class or function resolvable by ``name``."""

    def decorator(target):
        _handlers[name] = target
        return target

    return decorator


def list_handlers() -> list[str]:
    return sorted(_handlers)


def resolve(handler_type_name: str, event_type_name: str) -> HandlerDescriptor:
    """Load, validate and instantiate a handler by name.

    ``handler_type_name`` is a registered name, ``package.module:Name``
    or ``package.module.Name``.

    Raises:
        ConfigurationError: missing names, unknown handler, no ``handle``
            capability, or a class that needs constructor arguments.
    """
    if not handler_type_name or not handler_type_name.strip():
        raise ConfigurationError("Handler type name is required")
    if not event_type_name or not event_type_name.strip():
        raise ConfigurationError("Event type name is required")

    target = _handlers.get(handler_type_name) or _import_target(handler_type_name)
    handler = _instantiate(target, handler_type_name)
    return HandlerDescriptor(
        handler_type_name=handler_type_name,
        event_type_name=event_type_name,
        shape=shape_for(event_type_name),
        handler=handler,
    )


def describe(handler: Any, event_type: str | type) -> HandlerDescriptor:
    """Build a descriptor around an already-constructed handler instance."""
    event_type_name = event_type if isinstance(event_type, str) else event_type.__name__
    if not event_type_name:
        raise ConfigurationError("Event type name is required")
    if inspect.isroutine(handler):
        handler_type_name = f"{handler.__module__}.{handler.__qualname__}"
        handler = _wrap_function(handler, handler_type_name)
    elif callable(getattr(handler, "handle", None)):
        handler_type_name = f"{type(handler).__module__}.{type(handler).__qualname__}"
    else:
        raise ConfigurationError(
            f"{type(handler).__name__} does not implement handle(event, context)"
        )
    return HandlerDescriptor(
        handler_type_name=handler_type_name,
        event_type_name=event_type_name,
        shape=shape_for(event_type_name),
        handler=handler,
    )


def _import_target(name: str) -> Any:
    if ":" in name:
        module_name, _, attr_path = name.partition(":")
    else:
        module_name, _, attr_path = name.rpartition(".")
    if not module_name or not attr_path:
        raise ConfigurationError(f"Cannot locate handler '{name}'")

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot locate handler '{name}': {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise ConfigurationError(f"Cannot locate handler '{name}': {e}") from e
    return target


def _instantiate(target: Any, name: str) -> Any:
    if inspect.isclass(target):
        if not callable(getattr(target, "handle", None)):
            raise ConfigurationError(f"{name} does not implement handle(event, context)")
        try:
            return target()
        except Exception as e:
            raise ConfigurationError(f"{name} cannot be instantiated without arguments: {e}") from e

    if inspect.isroutine(target):
        return _wrap_function(target, name)

    # Module-level instances are used as-is
    if callable(getattr(target, "handle", None)):
        return target

    raise ConfigurationError(f"{name} is not a handler class or function")


def _wrap_function(fn, name: str) -> FunctionHandler:
    try:
        inspect.signature(fn).bind(None, None)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must accept (event, context): {e}") from e
    return FunctionHandler(fn)
