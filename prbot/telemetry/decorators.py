"""Tracing decorators for prbot components."""

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

from prbot.telemetry.config import get_tracer

P = ParamSpec("P")
T = TypeVar("T")


def trace_async(
    name: Optional[str] = None,
    attributes: Optional[dict] = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for tracing async functions.

    Simple-typed arguments are recorded as span attributes. Exceptions are
    recorded on the span and re-raised.

    Example:
        @trace_async("engine.resolve")
        async def resolve(self, repository_id, pull_request_id):
            ...
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        span_name = name or func.__name__
        tracer = get_tracer(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with tracer.start_as_current_span(
                span_name,
                kind=kind,
                attributes=attributes,
            ) as span:
                try:
                    _add_arg_attributes(span, func, args, kwargs)

                    result = await func(*args, **kwargs)

                    span.set_status(Status(StatusCode.OK))
                    return result

                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper

    return decorator


def _add_arg_attributes(span: trace.Span, func: Callable, args: tuple, kwargs: dict[str, Any]) -> None:
    """Add function arguments as span attributes (only simple types)."""
    param_names = list(inspect.signature(func).parameters.keys())

    for param_name, value in zip(param_names, args):
        if param_name == "self":
            continue
        if isinstance(value, (str, int, float, bool)):
            span.set_attribute(f"arg.{param_name}", value)

    for key, value in kwargs.items():
        if isinstance(value, (str, int, float, bool)):
            span.set_attribute(f"arg.{key}", value)
