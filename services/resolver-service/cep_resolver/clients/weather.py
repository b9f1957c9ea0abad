"""
Client for the WeatherAPI current conditions endpoint.
"""

import time
from typing import Optional

import httpx
from pydantic import ValidationError

from cep_common.errors import ConfigurationMissingError, UpstreamServiceError
from cep_common.logging_config import get_logger
from cep_common.models import WeatherLookupResult
from cep_common.tracing_utils import add_span_attributes

from ..metrics import track_upstream_call
from .base import ExternalApiClient

logger = get_logger(__name__)


class WeatherClient(ExternalApiClient):
    """
    Client for ``GET /v1/current.json`` on WeatherAPI.

    Attributes:
        api_key: WeatherAPI key; lookups fail before any request when unset
    """

    upstream_name = "weatherapi"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "http://api.weatherapi.com",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout, transport)
        self.api_key = api_key

    async def current(self, city: str) -> WeatherLookupResult:
        """
        Fetch current conditions for a city.

        Args:
            city: City name as returned by the directory API

        Returns:
            Current conditions including the Celsius temperature

        Raises:
            ConfigurationMissingError: WEATHER_API_KEY is not configured
            UpstreamServiceError: Non-200 response, transport or decode failure
        """
        if not self.api_key:
            raise ConfigurationMissingError("WEATHER_API_KEY")

        url = f"{self.base_url}/v1/current.json"
        params = {"key": self.api_key, "q": city, "aqi": "no"}

        # The key stays out of span attributes
        add_span_attributes(
            {
                "http.method": "GET",
                "http.url": str(httpx.URL(url, params={"q": city, "aqi": "no"})),
            }
        )

        start_time = time.perf_counter()
        try:
            client = await self._get_client()
            response = await client.get(
                url, params=params, headers=self._get_request_headers()
            )
        except httpx.RequestError as error:
            duration = time.perf_counter() - start_time
            track_upstream_call(self.upstream_name, "transport_error", duration)
            logger.error(
                "Request to weather API failed",
                extra={
                    "extra_fields": {
                        "city": city,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            raise UpstreamServiceError(
                self.upstream_name, str(error) or type(error).__name__
            ) from error

        duration = time.perf_counter() - start_time
        add_span_attributes({"http.status_code": response.status_code})

        if response.status_code != httpx.codes.OK:
            track_upstream_call(self.upstream_name, "http_error", duration)
            logger.error(
                f"Weather API error response: {response.text[:500]}",
                extra={
                    "extra_fields": {
                        "city": city,
                        "status_code": response.status_code,
                    }
                },
            )
            raise UpstreamServiceError(
                self.upstream_name,
                f"weather API returned status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            result = WeatherLookupResult.model_validate_json(response.content)
        except ValidationError as error:
            track_upstream_call(self.upstream_name, "decode_error", duration)
            raise UpstreamServiceError(
                self.upstream_name,
                f"failed to decode weather response: {error}",
                status_code=response.status_code,
            ) from error

        track_upstream_call(self.upstream_name, "success", duration)
        logger.info(
            f"Temperature search took {duration * 1000:.2f}ms",
            extra={"extra_fields": {"city": city, "temp_c": result.current.temp_c}},
        )

        return result
