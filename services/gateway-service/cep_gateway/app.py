"""
Gateway Service - Main FastAPI Application.

Client-facing entry point. Accepts ``{"cep": "..."}``, validates the CEP and
forwards it to the resolver service with the trace context propagated.
Resolver errors are relayed to the client unchanged.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from cep_common.errors import INVALID_ZIPCODE_MESSAGE, UpstreamServiceError
from cep_common.logging_config import get_logger, setup_logging
from cep_common.middleware import (
    PrometheusMiddleware,
    RequestLoggingMiddleware,
    RequestTracingMiddleware,
)
from cep_common.models import CepRequest, TemperatureResult
from cep_common.responses import internal_error, json_error, plain_error
from cep_common.telemetry import Telemetry, configure_telemetry
from cep_common.tracing_utils import record_span_error, trace_operation
from cep_common.validation import is_valid_cep

from .config import GatewaySettings
from .dependencies import get_resolver_client, get_telemetry
from .metrics import metrics_endpoint, track_request_metrics
from .resolver_client import ResolverClient

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Connects to the trace collector before requests are served and releases
    the resolver client and tracing pipeline on shutdown.
    """
    settings: GatewaySettings = app.state.settings

    logger.info("=" * 80)
    logger.info("Starting Gateway Service")
    logger.info("=" * 80)

    if app.state.telemetry is None:
        app.state.telemetry = await asyncio.to_thread(
            configure_telemetry,
            settings.OTEL_SERVICE_NAME,
            settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            enabled=settings.TRACING_ENABLED,
            max_attempts=settings.COLLECTOR_MAX_ATTEMPTS,
            retry_delay=settings.COLLECTOR_RETRY_DELAY,
            connect_timeout=settings.COLLECTOR_CONNECT_TIMEOUT,
        )

    logger.info(
        "Configuration loaded",
        extra={
            "extra_fields": {
                "service_name": settings.OTEL_SERVICE_NAME,
                "collector_endpoint": settings.OTEL_EXPORTER_OTLP_ENDPOINT,
                "tracing_enabled": app.state.telemetry.enabled,
                "resolver_service_url": settings.RESOLVER_SERVICE_URL,
                "request_timeout": settings.REQUEST_TIMEOUT,
                "port": settings.HTTP_PORT,
            }
        },
    )

    yield

    logger.info("Shutting down Gateway Service")

    await app.state.resolver_client.close()
    logger.info("HTTP clients closed")

    app.state.telemetry.shutdown()


def create_app(
    settings: Optional[GatewaySettings] = None,
    telemetry: Optional[Telemetry] = None,
    resolver_client: Optional[ResolverClient] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        settings: Service settings, read from the environment when omitted
        telemetry: Tracing handle; configured at startup when omitted
        resolver_client: Resolver client override

    Returns:
        Configured FastAPI application
    """
    settings = settings or GatewaySettings()

    app = FastAPI(
        title="CEP Gateway Service",
        description="Validates a CEP and forwards it to the resolver service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.resolver_client = resolver_client or ResolverClient(
        base_url=settings.RESOLVER_SERVICE_URL,
        timeout=settings.REQUEST_TIMEOUT,
    )

    # Last added runs first: request ID, then metrics, then the server span
    app.add_middleware(RequestTracingMiddleware)
    app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> Response:
        """Handle all unhandled exceptions."""
        logger.error(
            f"Unhandled exception: {exc}",
            extra={
                "extra_fields": {
                    "path": request.url.path,
                    "method": request.method,
                    "error_type": type(exc).__name__,
                }
            },
            exc_info=exc,
        )
        return internal_error(request)

    @app.get("/health")
    async def health(telemetry: Telemetry = Depends(get_telemetry)) -> dict:
        return {
            "status": "healthy",
            "service": settings.OTEL_SERVICE_NAME,
            "tracing": telemetry.enabled,
        }

    @app.post("/")
    async def handle_cep(
        request: Request,
        telemetry: Telemetry = Depends(get_telemetry),
        resolver: ResolverClient = Depends(get_resolver_client),
    ) -> Response:
        """
        Validate a CEP and return the temperature of its city.

        Responses:
            200: ``{"city", "temp_C", "temp_F", "temp_K"}``
            400: malformed body
            422: invalid CEP
            4xx/5xx: relayed from the resolver
            500: resolver unreachable or undecodable
        """
        tracer = telemetry.tracer

        with trace_operation(tracer, "gateway.handle_cep") as span:
            body = await request.body()
            try:
                cep_request = CepRequest.from_body(body)
            except ValueError as error:
                record_span_error(span, error)
                logger.info(
                    "Rejected malformed request body",
                    extra={"extra_fields": {"body_size": len(body)}},
                )
                return plain_error(400, "invalid request body")

            cep = cep_request.cep

            with trace_operation(tracer, "gateway.validate_cep"):
                is_valid = is_valid_cep(cep)

            if not is_valid:
                record_span_error(span, ValueError(INVALID_ZIPCODE_MESSAGE))
                logger.info(
                    "Rejected invalid CEP",
                    extra={"extra_fields": {"cep": cep}},
                )
                return json_error(422, INVALID_ZIPCODE_MESSAGE)

            with trace_operation(
                tracer, "gateway.call_resolver", {"cep": cep}
            ) as call_span:
                try:
                    response = await resolver.fetch_temperature(cep, telemetry)
                except UpstreamServiceError as error:
                    record_span_error(call_span, error)
                    return plain_error(500, error.message)

                call_span.set_attribute("http.status_code", response.status_code)

                if response.status_code != 200:
                    logger.info(
                        "Relaying resolver error",
                        extra={
                            "extra_fields": {
                                "cep": cep,
                                "status_code": response.status_code,
                            }
                        },
                    )
                    return Response(
                        content=response.content,
                        status_code=response.status_code,
                        media_type="application/json",
                    )

                try:
                    result = TemperatureResult.model_validate_json(response.content)
                except ValidationError as error:
                    record_span_error(call_span, error)
                    logger.error(
                        "Could not decode resolver response",
                        extra={
                            "extra_fields": {
                                "cep": cep,
                                "response_body": response.text[:500],
                            }
                        },
                    )
                    return plain_error(500, f"failed to decode response: {error}")

            return JSONResponse(status_code=200, content=result.model_dump())

    return app


def main() -> None:
    """Run the gateway service with uvicorn."""
    import uvicorn

    settings = GatewaySettings()
    setup_logging(
        log_level=settings.LOG_LEVEL,
        service_name=settings.OTEL_SERVICE_NAME,
        use_json=settings.LOG_JSON,
    )
    logger.info(f"Gateway service starting on port {settings.HTTP_PORT}")

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.HTTP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
