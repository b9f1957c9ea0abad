"""
Prometheus metrics for the gateway service.

Tracks inbound requests and calls forwarded to the resolver.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "gateway_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "gateway_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Resolver proxy metrics
resolver_requests_total = Counter(
    "gateway_resolver_requests_total",
    "Total requests forwarded to the resolver service",
    ["status"],
)

resolver_request_duration_seconds = Histogram(
    "gateway_resolver_request_duration_seconds",
    "Resolver request duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

resolver_errors_total = Counter(
    "gateway_resolver_errors_total",
    "Total resolver request errors",
    ["error_type"],
)


def track_request_metrics(
    method: str, endpoint: str, status_code: int, duration: float
):
    """Track HTTP request metrics."""
    http_requests_total.labels(
        method=method, endpoint=endpoint, status=status_code
    ).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
        duration
    )


def track_resolver_request(status_code: int, duration: float):
    """Track a completed call to the resolver."""
    resolver_requests_total.labels(status=status_code).inc()
    resolver_request_duration_seconds.observe(duration)


def track_resolver_error(error_type: str):
    """Track resolver transport errors."""
    resolver_errors_total.labels(error_type=error_type).inc()


async def metrics_endpoint():
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
