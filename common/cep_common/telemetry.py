"""
OpenTelemetry bootstrap for the CEP temperature services.

Builds the OTLP/gRPC export pipeline for a service and hands back a
``Telemetry`` handle. The handle is stored on the application state and
passed to request handling explicitly; nothing is installed into the
process-global OpenTelemetry tracer provider or propagator.
"""

import time
from typing import Any, Mapping, MutableMapping, Optional

import grpc
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_RETRY_DELAY = 2.0
DEFAULT_CONNECT_TIMEOUT = 5.0


class TelemetryInitError(Exception):
    """Raised when the tracing pipeline cannot be initialized."""


class Telemetry:
    """
    Tracing handle for one service.

    Holds the tracer provider, the tracer used by request handlers and the
    propagator used to carry trace context across the gateway to resolver
    hop.

    Attributes:
        service_name: Logical service name reported on spans
        tracer_provider: Provider spans are created from
        propagator: W3C TraceContext propagator
        enabled: False when running without an export pipeline
    """

    def __init__(
        self,
        service_name: str,
        tracer_provider: trace.TracerProvider,
        propagator: Optional[TraceContextTextMapPropagator] = None,
        enabled: bool = True,
    ) -> None:
        self.service_name = service_name
        self.tracer_provider = tracer_provider
        self.propagator = propagator or TraceContextTextMapPropagator()
        self.enabled = enabled
        self.tracer = tracer_provider.get_tracer(service_name)

    @classmethod
    def disabled(cls, service_name: str) -> "Telemetry":
        """
        Create a handle that records nothing.

        Trace context is still propagated so that upstream identifiers are
        not lost when this service has no collector.
        """
        return cls(service_name, trace.NoOpTracerProvider(), enabled=False)

    def inject(
        self,
        headers: MutableMapping[str, str],
        context: Optional[Context] = None,
    ) -> None:
        """
        Write the current (or given) trace context into outbound headers.

        Args:
            headers: Outbound header mapping, modified in place
            context: Context to inject, defaults to the current context
        """
        self.propagator.inject(headers, context=context)

    def extract(self, headers: Mapping[str, Any]) -> Context:
        """
        Read trace context from inbound headers.

        Args:
            headers: Inbound request headers

        Returns:
            Context carrying the remote parent span, if any
        """
        return self.propagator.extract(headers)

    def shutdown(self) -> None:
        """
        Flush pending spans and stop the export pipeline.

        Failures are logged and never raised.
        """
        shutdown = getattr(self.tracer_provider, "shutdown", None)
        if shutdown is None:
            return
        try:
            shutdown()
            logger.info(f"Tracer provider shut down for {self.service_name}")
        except Exception as error:
            logger.warning(
                f"Failed to shutdown TracerProvider: {error}",
                extra={"extra_fields": {"service_name": self.service_name}},
            )


def _grpc_target(endpoint: str) -> str:
    """Strip an http(s) scheme so the endpoint can be dialled directly."""
    for scheme in ("http://", "https://"):
        if endpoint.startswith(scheme):
            return endpoint[len(scheme):].rstrip("/")
    return endpoint


def wait_for_collector(
    endpoint: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> int:
    """
    Block until a gRPC connection to the collector can be established.

    Args:
        endpoint: Collector address (``host:port``, scheme optional)
        max_attempts: Number of connection attempts before giving up
        retry_delay: Fixed delay between attempts in seconds
        connect_timeout: Per-attempt connect timeout in seconds

    Returns:
        Number of attempts it took to connect

    Raises:
        TelemetryInitError: If every attempt failed
    """
    target = _grpc_target(endpoint)

    for attempt in range(1, max_attempts + 1):
        channel = grpc.insecure_channel(target)
        try:
            grpc.channel_ready_future(channel).result(timeout=connect_timeout)
        except grpc.FutureTimeoutError:
            if attempt == max_attempts:
                raise TelemetryInitError(
                    f"failed to create gRPC connection to collector after "
                    f"{max_attempts} attempts"
                )
            logger.info(
                f"Failed to connect to collector (attempt {attempt}/{max_attempts}). "
                f"Retrying in {retry_delay}s...",
                extra={"extra_fields": {"collector_endpoint": endpoint}},
            )
            time.sleep(retry_delay)
        else:
            logger.info(
                f"Successfully connected to OTEL collector after {attempt} attempts",
                extra={"extra_fields": {"collector_endpoint": endpoint}},
            )
            return attempt
        finally:
            channel.close()

    raise TelemetryInitError("collector connection was never attempted")


def init_telemetry(
    service_name: str,
    collector_endpoint: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> Telemetry:
    """
    Build the trace export pipeline for a service.

    Args:
        service_name: Name reported as ``service.name`` on the resource
        collector_endpoint: OTLP/gRPC collector address
        max_attempts: Collector connection attempts
        retry_delay: Delay between connection attempts in seconds
        connect_timeout: Per-attempt connect timeout in seconds

    Returns:
        Telemetry handle backed by a batching OTLP exporter

    Raises:
        TelemetryInitError: If the collector is unreachable or the
            exporter cannot be created
    """
    resource = Resource.create({SERVICE_NAME: service_name})

    wait_for_collector(
        collector_endpoint,
        max_attempts=max_attempts,
        retry_delay=retry_delay,
        connect_timeout=connect_timeout,
    )

    try:
        otlp_exporter = OTLPSpanExporter(endpoint=collector_endpoint, insecure=True)
    except Exception as error:
        raise TelemetryInitError(f"failed to create trace exporter: {error}") from error

    tracer_provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    return Telemetry(service_name, tracer_provider)


def configure_telemetry(
    service_name: str,
    collector_endpoint: str,
    enabled: bool = True,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> Telemetry:
    """
    Initialize tracing, falling back to a disabled handle on failure.

    Args:
        service_name: Name reported on spans
        collector_endpoint: OTLP/gRPC collector address
        enabled: Whether to attempt tracing at all
        max_attempts: Collector connection attempts
        retry_delay: Delay between connection attempts in seconds
        connect_timeout: Per-attempt connect timeout in seconds

    Returns:
        Telemetry handle, disabled if tracing could not be set up
    """
    if not enabled:
        logger.info("Tracing disabled by configuration")
        return Telemetry.disabled(service_name)

    try:
        return init_telemetry(
            service_name,
            collector_endpoint,
            max_attempts=max_attempts,
            retry_delay=retry_delay,
            connect_timeout=connect_timeout,
        )
    except TelemetryInitError as error:
        logger.warning(
            f"Failed to initialize OTEL provider: {error}. Continuing without tracing.",
            extra={"extra_fields": {"collector_endpoint": collector_endpoint}},
        )
        return Telemetry.disabled(service_name)
