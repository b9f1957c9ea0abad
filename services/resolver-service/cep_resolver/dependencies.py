"""
Dependency injection functions for the resolver routes.

The service objects live on ``app.state`` and are set by ``create_app``.
"""

from fastapi import Request

from cep_common.telemetry import Telemetry

from .service import TemperatureService


def get_telemetry(request: Request) -> Telemetry:
    """
    Get the tracing handle of the application.

    Falls back to a disabled handle while tracing has not been configured.
    """
    telemetry = getattr(request.app.state, "telemetry", None)
    if telemetry is None:
        return Telemetry.disabled(request.app.state.settings.OTEL_SERVICE_NAME)
    return telemetry


def get_temperature_service(request: Request) -> TemperatureService:
    """Get the temperature service instance."""
    service = getattr(request.app.state, "temperature_service", None)
    if service is None:
        raise RuntimeError("Temperature service not initialized")
    return service
