"""
Settings shared by the CEP temperature services.

Each service subclasses ``ServiceSettings`` with its own defaults and extra
fields. All values can be overridden via environment variables or a .env
file.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_service_url(value: str) -> str:
    """
    Validate a service base URL.

    Args:
        value: The URL to validate

    Returns:
        The validated URL without trailing slash

    Raises:
        ValueError: If URL is empty or not http(s)
    """
    if not value:
        raise ValueError("Service URL cannot be empty")

    value = value.rstrip("/")

    if not (value.startswith("http://") or value.startswith("https://")):
        raise ValueError(
            f"Service URL must start with http:// or https://, got: {value}"
        )

    return value


class ServiceSettings(BaseSettings):
    """
    Settings common to the gateway and resolver.

    Attributes:
        OTEL_SERVICE_NAME: Logical service name reported on spans and logs
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP/gRPC collector address
        TRACING_ENABLED: Attempt to connect to the collector at startup
        COLLECTOR_MAX_ATTEMPTS: Collector connection attempts before giving up
        COLLECTOR_RETRY_DELAY: Fixed delay between attempts in seconds
        COLLECTOR_CONNECT_TIMEOUT: Per-attempt connect timeout in seconds
        HOST: Server bind address
        HTTP_PORT: Server port number (``:8080`` style values are accepted)
        LOG_LEVEL: Logging level
        LOG_JSON: Emit JSON log lines instead of human-readable ones
    """

    OTEL_SERVICE_NAME: str = Field(
        default="cep-service",
        description="Logical service name",
    )
    OTEL_EXPORTER_OTLP_ENDPOINT: str = Field(
        default="otel-collector:4317",
        description="OTLP gRPC collector endpoint",
    )
    TRACING_ENABLED: bool = Field(
        default=True,
        description="Enable distributed tracing",
    )
    COLLECTOR_MAX_ATTEMPTS: int = Field(default=20, ge=1, le=100)
    COLLECTOR_RETRY_DELAY: float = Field(default=2.0, ge=0)
    COLLECTOR_CONNECT_TIMEOUT: float = Field(default=5.0, gt=0)

    HOST: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    HTTP_PORT: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Server port number",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("HTTP_PORT", mode="before")
    @classmethod
    def strip_port_prefix(cls, value: object) -> object:
        """Accept listen addresses written as ``:8080``."""
        if isinstance(value, str):
            return value.strip().lstrip(":")
        return value
