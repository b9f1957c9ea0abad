"""
Span helpers used by the request handlers.

Provides custom spans and error recording on top of the tracer carried by a
``Telemetry`` handle.
"""

from contextlib import contextmanager
from typing import Any, Generator, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


@contextmanager
def trace_operation(
    tracer: trace.Tracer,
    operation_name: str,
    attributes: Optional[dict[str, Any]] = None,
) -> Generator[trace.Span, None, None]:
    """
    Context manager for tracing an operation with attributes.

    Exceptions escaping the block are recorded on the span and re-raised.

    Args:
        tracer: Tracer to create the span with
        operation_name: Name of operation
        attributes: Optional attributes to add to span

    Yields:
        Active span

    Example:
        with trace_operation(tracer, "resolver.search_cep", {"cep": cep}):
            result = await directory.lookup(cep)
    """
    with tracer.start_as_current_span(
        operation_name,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        try:
            yield span
        except Exception as e:
            record_span_error(span, e)
            raise


def record_span_error(span: trace.Span, error: BaseException) -> None:
    """
    Mark a span as failed.

    Args:
        span: Span to update
        error: Error to record
    """
    if span.is_recording():
        span.set_status(Status(StatusCode.ERROR, str(error)))
        span.record_exception(error)


def current_trace_id() -> Optional[str]:
    """Return the hex trace ID of the active span, or None."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def add_span_attributes(attributes: dict[str, Any]) -> None:
    """
    Add attributes to current active span.

    Args:
        attributes: Attributes to add
    """
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)
