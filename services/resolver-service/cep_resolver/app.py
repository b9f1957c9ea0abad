"""
Resolver Service - Main FastAPI Application.

Resolves a CEP received in the ``X-CEP`` header to a city through ViaCEP,
fetches the current temperature for that city from WeatherAPI and returns
it in Celsius, Fahrenheit and Kelvin.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from cep_common.errors import (
    CEP_HEADER_REQUIRED_MESSAGE,
    INVALID_ZIPCODE_MESSAGE,
    CepServiceError,
)
from cep_common.logging_config import get_logger, setup_logging
from cep_common.middleware import (
    PrometheusMiddleware,
    RequestLoggingMiddleware,
    RequestTracingMiddleware,
)
from cep_common.responses import error_response, internal_error, json_error
from cep_common.telemetry import Telemetry, configure_telemetry
from cep_common.tracing_utils import record_span_error, trace_operation
from cep_common.validation import is_valid_cep

from .clients import DirectoryClient, WeatherClient
from .config import ResolverSettings
from .dependencies import get_telemetry, get_temperature_service
from .metrics import metrics_endpoint, track_request_metrics
from .service import TemperatureService

CEP_HEADER = "X-CEP"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Connects to the trace collector before requests are served and flushes
    the tracing pipeline on shutdown.
    """
    settings: ResolverSettings = app.state.settings

    logger.info("=" * 80)
    logger.info("Starting Resolver Service")
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
                "viacep_base_url": settings.VIACEP_BASE_URL,
                "weather_api_base_url": settings.WEATHER_API_BASE_URL,
                "weather_api_key_set": settings.WEATHER_API_KEY is not None,
                "upstream_timeout": settings.UPSTREAM_TIMEOUT,
                "port": settings.HTTP_PORT,
            }
        },
    )

    if settings.WEATHER_API_KEY is None:
        logger.warning("WEATHER_API_KEY not set, temperature lookups will fail")

    yield

    logger.info("Shutting down Resolver Service")

    await app.state.temperature_service.close()
    logger.info("HTTP clients closed")

    app.state.telemetry.shutdown()


def create_app(
    settings: Optional[ResolverSettings] = None,
    telemetry: Optional[Telemetry] = None,
    directory_client: Optional[DirectoryClient] = None,
    weather_client: Optional[WeatherClient] = None,
) -> FastAPI:
    """
    Build the resolver application.

    Args:
        settings: Service settings, read from the environment when omitted
        telemetry: Tracing handle; configured at startup when omitted
        directory_client: ViaCEP client override
        weather_client: WeatherAPI client override

    Returns:
        Configured FastAPI application
    """
    settings = settings or ResolverSettings()

    app = FastAPI(
        title="CEP Resolver Service",
        description="Resolves a CEP to the current temperature of its city",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.temperature_service = TemperatureService(
        directory=directory_client
        or DirectoryClient(
            base_url=settings.VIACEP_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT,
        ),
        weather=weather_client
        or WeatherClient(
            api_key=settings.WEATHER_API_KEY,
            base_url=settings.WEATHER_API_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT,
        ),
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

    @app.post("/temperature")
    async def handle_temperature(
        request: Request,
        telemetry: Telemetry = Depends(get_telemetry),
        service: TemperatureService = Depends(get_temperature_service),
    ) -> Response:
        """
        Resolve the CEP in the ``X-CEP`` header to a temperature.

        Responses:
            200: ``{"city", "temp_C", "temp_F", "temp_K"}``
            400: header missing
            422: invalid CEP
            404: CEP not found
            500: upstream failure or missing configuration
        """
        tracer = telemetry.tracer

        with trace_operation(tracer, "resolver.handle_temperature") as span:
            cep = request.headers.get(CEP_HEADER, "")
            if not cep:
                record_span_error(span, ValueError("CEP not provided"))
                return json_error(400, CEP_HEADER_REQUIRED_MESSAGE)

            with trace_operation(tracer, "resolver.validate_cep"):
                is_valid = is_valid_cep(cep)

            if not is_valid:
                record_span_error(span, ValueError(INVALID_ZIPCODE_MESSAGE))
                logger.info(
                    "Rejected invalid CEP",
                    extra={"extra_fields": {"cep": cep}},
                )
                return json_error(422, INVALID_ZIPCODE_MESSAGE)

            try:
                result = await service.get_temperature(cep, tracer)
            except CepServiceError as error:
                record_span_error(span, error)
                logger.warning(
                    f"Temperature lookup failed: {error.message}",
                    extra={
                        "extra_fields": {
                            "cep": cep,
                            "error_kind": error.kind.value,
                            **error.details,
                        }
                    },
                )
                return error_response(error)

            logger.info(
                "Temperature resolved",
                extra={"extra_fields": {"cep": cep, **result.model_dump()}},
            )
            return JSONResponse(status_code=200, content=result.model_dump())

    return app


def main() -> None:
    """Run the resolver service with uvicorn."""
    import uvicorn

    settings = ResolverSettings()
    setup_logging(
        log_level=settings.LOG_LEVEL,
        service_name=settings.OTEL_SERVICE_NAME,
        use_json=settings.LOG_JSON,
    )
    logger.info(f"Resolver service starting on port {settings.HTTP_PORT}")

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.HTTP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
