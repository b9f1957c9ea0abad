"""
Configuration module for the gateway service.

All configuration values can be overridden via environment variables or a
.env file.
"""

from pydantic import Field, field_validator

from cep_common.config import ServiceSettings, normalize_service_url


class GatewaySettings(ServiceSettings):
    """
    Settings for the gateway service.

    Attributes:
        RESOLVER_SERVICE_URL: Base URL of the resolver service
        REQUEST_TIMEOUT: Timeout for calls to the resolver in seconds
    """

    OTEL_SERVICE_NAME: str = Field(default="gateway-service")
    HTTP_PORT: int = Field(default=8080, ge=1, le=65535)

    RESOLVER_SERVICE_URL: str = Field(
        default="http://resolver-service:8081",
        description="Base URL for the resolver service",
    )
    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Timeout for resolver requests in seconds",
    )

    @field_validator("RESOLVER_SERVICE_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return normalize_service_url(value)
