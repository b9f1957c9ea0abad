"""
Gateway Service Package.

Client-facing service that validates a CEP and forwards it to the resolver
service.
"""

__version__ = "1.0.0"
__description__ = "CEP validation gateway"

from .app import create_app
from .config import GatewaySettings

__all__ = [
    "create_app",
    "GatewaySettings",
    "__version__",
]
