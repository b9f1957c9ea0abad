"""
Prometheus metrics for the resolver service.

Tracks inbound requests and calls to the directory and weather APIs.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "resolver_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "resolver_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Upstream API metrics
upstream_requests_total = Counter(
    "resolver_upstream_requests_total",
    "Total requests to external APIs",
    ["upstream", "outcome"],
)

upstream_request_duration_seconds = Histogram(
    "resolver_upstream_request_duration_seconds",
    "External API request duration in seconds",
    ["upstream"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
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


def track_upstream_call(upstream: str, outcome: str, duration: float):
    """Track a directory or weather API call."""
    upstream_requests_total.labels(upstream=upstream, outcome=outcome).inc()
    upstream_request_duration_seconds.labels(upstream=upstream).observe(duration)


async def metrics_endpoint():
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
