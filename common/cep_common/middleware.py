"""
Middleware components shared by the gateway and resolver services.

Provides request ID assignment and logging, per-request server spans built
from the service's ``Telemetry`` handle, and Prometheus request tracking.
"""

import time
from typing import Callable, Iterable, Optional

from fastapi import Request, Response
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import clear_request_id, get_logger, set_request_id
from .tracing_utils import current_trace_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request and response logging.

    Assigns a request ID (taken from ``X-Request-ID`` when the caller sent
    one), logs request start and completion with timing, and echoes the
    request ID on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and log details.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            HTTP response
        """
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER) or None)
        request.state.request_id = request_id

        start_time = time.perf_counter()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "client_host": request.client.host if request.client else None,
                    "user_agent": request.headers.get("user-agent"),
                }
            },
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id

            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"[{response.status_code}] ({duration_ms:.2f}ms)",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    }
                },
            )

            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} ({duration_ms:.2f}ms)",
                extra={"extra_fields": {"error": str(exc)}},
            )
            raise
        finally:
            clear_request_id()


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Open a SERVER span for every request.

    The parent context is extracted from the inbound headers with the
    propagator of the ``Telemetry`` handle found on ``app.state.telemetry``,
    so a trace started in the gateway continues in the resolver.
    """

    def __init__(
        self,
        app: ASGIApp,
        excluded_paths: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Initialize request tracing middleware.

        Args:
            app: ASGI application instance
            excluded_paths: Paths that are never traced
        """
        super().__init__(app)
        self.excluded_paths = frozenset(excluded_paths or ("/health", "/metrics"))

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        telemetry = getattr(request.app.state, "telemetry", None)
        if telemetry is None or request.url.path in self.excluded_paths:
            return await call_next(request)

        parent_context = telemetry.extract(request.headers)

        with telemetry.tracer.start_as_current_span(
            f"{request.method} {request.url.path}",
            context=parent_context,
            kind=SpanKind.SERVER,
            attributes={
                "http.method": request.method,
                "http.route": request.url.path,
                "http.scheme": request.url.scheme,
            },
        ) as span:
            response = await call_next(request)

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(Status(StatusCode.ERROR))

            trace_id = current_trace_id()
            if trace_id:
                logger.debug(
                    "Request traced",
                    extra={"extra_fields": {"trace_id": trace_id}},
                )

            return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Track Prometheus metrics for all HTTP requests.

    Tracks request count and duration by method, endpoint and status code.
    """

    def __init__(self, app: ASGIApp, track_func: Callable) -> None:
        """
        Initialize the middleware.

        Args:
            app: ASGI application
            track_func: Called with (method, endpoint, status_code, duration)
        """
        super().__init__(app)
        self.track_func = track_func

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        self.track_func(
            method=request.method,
            endpoint=request.url.path,
            status_code=response.status_code,
            duration=time.perf_counter() - start_time,
        )

        return response
