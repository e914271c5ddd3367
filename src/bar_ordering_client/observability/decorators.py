"""OpenTelemetry tracing decorators."""

import functools
import inspect
import time
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

from bar_ordering_client.observability.metrics import SERVICE_NAME, record_backend_call

F = TypeVar("F", bound=Callable[..., Any])


def traced(span_name: str | None = None, service_name: str = SERVICE_NAME) -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Each call runs inside its own span; exceptions are recorded on the span
    and re-raised. Async functions are the backend calls, so their duration
    also goes to the backend call histogram under the span name.

    Args:
        span_name: Name for the span (defaults to function name if not provided)
        service_name: Service name for span attributes

    Returns:
        Decorated function with tracing

    Example:
        @traced("orders.list_orders")
        async def list_orders(self) -> list[Order]:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        def start_span(span: Span) -> None:
            span.set_attribute("service.name", service_name)
            if span_name:
                span.set_attribute("function.name", func.__name__)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                started = time.monotonic()
                with tracer.start_as_current_span(name) as span:
                    start_span(span)
                    try:
                        result = await func(*args, **kwargs)
                    except Exception as e:
                        _record_failure(span, e)
                        raise
                    finally:
                        record_backend_call(name, time.monotonic() - started)
                    span.set_attribute("success", True)
                    return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                start_span(span)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _record_failure(span, e)
                    raise
                span.set_attribute("success", True)
                return result

        return sync_wrapper  # type: ignore

    return decorator


def _record_failure(span: Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))
    span.record_exception(error)
