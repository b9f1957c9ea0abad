"""
Resolver Service Package.

Turns a validated CEP into the current temperature of its city using the
ViaCEP directory API and WeatherAPI.
"""

__version__ = "1.0.0"
__description__ = "CEP to temperature resolver"

from .app import create_app
from .config import ResolverSettings

__all__ = [
    "create_app",
    "ResolverSettings",
    "__version__",
]
