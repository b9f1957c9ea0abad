"""
Shared library for the CEP temperature services.

Holds the pieces both the gateway and the resolver need: CEP validation,
wire models, error kinds, temperature conversions, the tracing bootstrap,
logging setup and HTTP middleware.
"""

__version__ = "1.0.0"

from .conversions import celsius_to_fahrenheit, celsius_to_kelvin
from .errors import (
    CepServiceError,
    ConfigurationMissingError,
    ErrorKind,
    InvalidZipcodeError,
    UpstreamServiceError,
    ZipcodeNotFoundError,
    status_code_for,
)
from .models import CepRequest, TemperatureResult
from .telemetry import Telemetry, configure_telemetry, init_telemetry
from .validation import is_valid_cep

__all__ = [
    "CepRequest",
    "CepServiceError",
    "ConfigurationMissingError",
    "ErrorKind",
    "InvalidZipcodeError",
    "Telemetry",
    "TemperatureResult",
    "UpstreamServiceError",
    "ZipcodeNotFoundError",
    "celsius_to_fahrenheit",
    "celsius_to_kelvin",
    "configure_telemetry",
    "init_telemetry",
    "is_valid_cep",
    "status_code_for",
    "__version__",
]
