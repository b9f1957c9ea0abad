"""
Gateway Service Tests - Test Configuration.

Provides a stub resolver service and a factory for gateway apps wired to it.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

RESOLVER_URL = "http://resolver.test"


class StubResolver:
    """Canned resolver responses; records every forwarded request."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body: Any = {
            "city": "São Paulo",
            "temp_C": 28.5,
            "temp_F": 83.3,
            "temp_K": 301.5,
        }
        self.error: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        content = self.body if isinstance(self.body, bytes) else json.dumps(self.body).encode()
        return httpx.Response(
            self.status_code,
            content=content,
            headers={"Content-Type": "application/json"},
        )


@pytest.fixture
def stub_resolver() -> StubResolver:
    return StubResolver()


@pytest.fixture
def gateway_settings():
    from cep_gateway.config import GatewaySettings

    return GatewaySettings(RESOLVER_SERVICE_URL=RESOLVER_URL, TRACING_ENABLED=False)


@pytest.fixture
def make_gateway_app(gateway_settings, stub_resolver, make_telemetry) -> Callable:
    from cep_gateway.app import create_app
    from cep_gateway.resolver_client import ResolverClient

    def _make():
        return create_app(
            gateway_settings,
            telemetry=make_telemetry("gateway-service"),
            resolver_client=ResolverClient(
                base_url=gateway_settings.RESOLVER_SERVICE_URL,
                timeout=gateway_settings.REQUEST_TIMEOUT,
                transport=httpx.MockTransport(stub_resolver.handler),
            ),
        )

    return _make


@pytest.fixture
def cep_body() -> Dict[str, str]:
    return {"cep": "01310100"}
