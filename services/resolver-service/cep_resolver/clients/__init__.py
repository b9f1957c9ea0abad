"""Clients for the directory (ViaCEP) and weather (WeatherAPI) services."""

from .viacep import DirectoryClient
from .weather import WeatherClient

__all__ = ["DirectoryClient", "WeatherClient"]
