"""
Root conftest.py for the CEP temperature services.

Puts the shared library and every service directory on sys.path so tests
run from a plain checkout, and provides tracing fixtures used by all test
suites.
"""

import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

ROOT_DIR = Path(__file__).parent


def pytest_configure(config):
    """
    Configure pytest to add the common and service directories to sys.path.

    Service packages have distinct names, so all of them can be importable
    at once.
    """
    sys.path.insert(0, str(ROOT_DIR / "common"))
    for service_path in sorted((ROOT_DIR / "services").glob("*-service")):
        sys.path.insert(0, str(service_path))

    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Exporter collecting every span finished during a test."""
    return InMemorySpanExporter()


@pytest.fixture
def make_telemetry(span_exporter: InMemorySpanExporter) -> Callable:
    """
    Factory for recording Telemetry handles.

    All handles created by one test export into the same in-memory exporter.
    """
    from cep_common.telemetry import Telemetry

    def _make(service_name: str) -> Telemetry:
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(span_exporter))
        return Telemetry(service_name, provider)

    return _make


VIACEP_SAO_PAULO = {
    "cep": "01310-100",
    "logradouro": "Avenida Paulista",
    "complemento": "de 612 a 1510 - lado par",
    "bairro": "Bela Vista",
    "localidade": "São Paulo",
    "uf": "SP",
}

WEATHER_SAO_PAULO = {
    "location": {"name": "Sao Paulo", "region": "Sao Paulo", "country": "Brazil"},
    "current": {"temp_c": 28.5, "temp_f": 83.3, "condition": {"text": "Sunny"}},
}

VIACEP_HOST = "viacep.test"
WEATHER_HOST = "weather.test"


class FakeUpstreams:
    """
    Stand-in for the ViaCEP and WeatherAPI services.

    Serves one canned response per API and records every request. A
    response can be replaced by an exception to simulate transport errors.
    """

    def __init__(self) -> None:
        self.viacep = (200, VIACEP_SAO_PAULO)
        self.weather = (200, WEATHER_SAO_PAULO)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        canned = self.viacep if request.url.host == VIACEP_HOST else self.weather
        if isinstance(canned, Exception):
            raise canned

        status_code, payload = canned
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, host: str) -> list:
        return [request for request in self.requests if request.url.host == host]


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def resolver_settings():
    from cep_resolver.config import ResolverSettings

    return ResolverSettings(
        WEATHER_API_KEY="test-key",
        VIACEP_BASE_URL=f"http://{VIACEP_HOST}",
        WEATHER_API_BASE_URL=f"http://{WEATHER_HOST}",
        TRACING_ENABLED=False,
    )


@pytest.fixture
def make_resolver_app(resolver_settings, upstreams: FakeUpstreams, make_telemetry):
    """Factory building resolver apps wired to the fake upstreams."""
    from cep_resolver.app import create_app
    from cep_resolver.clients import DirectoryClient, WeatherClient

    def _make(settings=None):
        settings = settings or resolver_settings
        return create_app(
            settings,
            telemetry=make_telemetry("resolver-service"),
            directory_client=DirectoryClient(
                base_url=settings.VIACEP_BASE_URL,
                transport=upstreams.transport,
            ),
            weather_client=WeatherClient(
                api_key=settings.WEATHER_API_KEY,
                base_url=settings.WEATHER_API_BASE_URL,
                transport=upstreams.transport,
            ),
        )

    return _make
