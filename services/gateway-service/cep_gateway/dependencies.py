"""
Dependency injection functions for the gateway routes.

The client and tracing handle live on ``app.state`` and are set by
``create_app`` and the lifespan hook.
"""

from fastapi import Request

from cep_common.telemetry import Telemetry

from .resolver_client import ResolverClient


def get_telemetry(request: Request) -> Telemetry:
    """
    Get the tracing handle of the application.

    Falls back to a disabled handle while tracing has not been configured.
    """
    telemetry = getattr(request.app.state, "telemetry", None)
    if telemetry is None:
        return Telemetry.disabled(request.app.state.settings.OTEL_SERVICE_NAME)
    return telemetry


def get_resolver_client(request: Request) -> ResolverClient:
    """Get the resolver client instance."""
    client = getattr(request.app.state, "resolver_client", None)
    if client is None:
        raise RuntimeError("Resolver client not initialized")
    return client
