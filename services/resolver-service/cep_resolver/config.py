"""
Configuration module for the resolver service.

All configuration values can be overridden via environment variables or a
.env file.
"""

from typing import Optional

from pydantic import Field, field_validator

from cep_common.config import ServiceSettings, normalize_service_url


class ResolverSettings(ServiceSettings):
    """
    Settings for the resolver service.

    Attributes:
        WEATHER_API_KEY: Key for the weather API; requests that reach the
            weather lookup fail with 500 while it is unset
        VIACEP_BASE_URL: Base URL of the directory API
        WEATHER_API_BASE_URL: Base URL of the weather API
        UPSTREAM_TIMEOUT: Timeout for directory and weather API calls in seconds
    """

    OTEL_SERVICE_NAME: str = Field(default="resolver-service")
    HTTP_PORT: int = Field(default=8081, ge=1, le=65535)

    WEATHER_API_KEY: Optional[str] = Field(
        default=None,
        description="WeatherAPI key",
    )
    VIACEP_BASE_URL: str = Field(
        default="https://viacep.com.br",
        description="Base URL of the postal directory API",
    )
    WEATHER_API_BASE_URL: str = Field(
        default="http://api.weatherapi.com",
        description="Base URL of the weather API",
    )
    UPSTREAM_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Timeout for external API requests in seconds",
    )

    @field_validator("VIACEP_BASE_URL", "WEATHER_API_BASE_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return normalize_service_url(value)

    @field_validator("WEATHER_API_KEY")
    @classmethod
    def blank_key_is_unset(cls, value: Optional[str]) -> Optional[str]:
        """Treat an empty WEATHER_API_KEY the same as a missing one."""
        if value is not None and not value.strip():
            return None
        return value
