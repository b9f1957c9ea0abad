"""
Temperature lookup pipeline of the resolver service.

Resolves a CEP to a city through the directory API, fetches the current
temperature for that city and converts it to Fahrenheit and Kelvin. Each
upstream call is attempted exactly once.
"""

from opentelemetry import trace

from cep_common.conversions import celsius_to_fahrenheit, celsius_to_kelvin
from cep_common.models import TemperatureResult
from cep_common.tracing_utils import trace_operation

from .clients import DirectoryClient, WeatherClient


class TemperatureService:
    """
    Orchestrates the directory and weather lookups.

    Attributes:
        directory: ViaCEP client
        weather: WeatherAPI client
    """

    def __init__(self, directory: DirectoryClient, weather: WeatherClient) -> None:
        self.directory = directory
        self.weather = weather

    async def get_temperature(self, cep: str, tracer: trace.Tracer) -> TemperatureResult:
        """
        Build the temperature result for a validated CEP.

        Args:
            cep: Validated 8-digit postal code
            tracer: Tracer of the current request

        Returns:
            City name with the temperature in three scales

        Raises:
            CepServiceError: Any failure of the directory or weather lookup
        """
        with trace_operation(tracer, "resolver.search_cep", {"cep": cep}):
            address = await self.directory.lookup(cep)

        with trace_operation(tracer, "resolver.get_temperature", {"city": address.city}):
            weather = await self.weather.current(address.city)

        temp_c = weather.current.temp_c
        return TemperatureResult(
            city=address.city,
            temp_C=temp_c,
            temp_F=celsius_to_fahrenheit(temp_c),
            temp_K=celsius_to_kelvin(temp_c),
        )

    async def close(self) -> None:
        await self.directory.close()
        await self.weather.close()
