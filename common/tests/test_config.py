"""
Unit tests for service settings.
"""

import pytest
from pydantic import ValidationError

from cep_common.config import ServiceSettings, normalize_service_url


class TestNormalizeServiceUrl:
    def test_strips_trailing_slash(self):
        assert normalize_service_url("http://resolver:8081/") == "http://resolver:8081"

    @pytest.mark.parametrize("value", ["", "resolver:8081", "ftp://resolver"])
    def test_rejects_non_http_urls(self, value):
        with pytest.raises(ValueError):
            normalize_service_url(value)


class TestServiceSettings:
    """Environment handling shared by both services"""

    def test_defaults(self, monkeypatch):
        for name in ("HTTP_PORT", "OTEL_EXPORTER_OTLP_ENDPOINT", "TRACING_ENABLED"):
            monkeypatch.delenv(name, raising=False)

        settings = ServiceSettings()

        assert settings.OTEL_EXPORTER_OTLP_ENDPOINT == "otel-collector:4317"
        assert settings.HTTP_PORT == 8080
        assert settings.COLLECTOR_MAX_ATTEMPTS == 20
        assert settings.COLLECTOR_RETRY_DELAY == 2.0
        assert settings.COLLECTOR_CONNECT_TIMEOUT == 5.0

    @pytest.mark.parametrize("value", [":9090", "9090"])
    def test_http_port_accepts_listen_address(self, monkeypatch, value):
        monkeypatch.setenv("HTTP_PORT", value)

        assert ServiceSettings().HTTP_PORT == 9090

    def test_http_port_out_of_range(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "70000")

        with pytest.raises(ValidationError):
            ServiceSettings()


class TestServiceDefaults:
    def test_gateway(self, monkeypatch):
        from cep_gateway.config import GatewaySettings

        for name in ("HTTP_PORT", "OTEL_SERVICE_NAME", "RESOLVER_SERVICE_URL"):
            monkeypatch.delenv(name, raising=False)

        settings = GatewaySettings()

        assert settings.OTEL_SERVICE_NAME == "gateway-service"
        assert settings.HTTP_PORT == 8080
        assert settings.RESOLVER_SERVICE_URL == "http://resolver-service:8081"
        assert settings.REQUEST_TIMEOUT == 10.0

    def test_resolver(self, monkeypatch):
        from cep_resolver.config import ResolverSettings

        monkeypatch.setenv("HTTP_PORT", ":8081")
        monkeypatch.setenv("WEATHER_API_KEY", "   ")
        monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)

        settings = ResolverSettings()

        assert settings.OTEL_SERVICE_NAME == "resolver-service"
        assert settings.HTTP_PORT == 8081
        assert settings.WEATHER_API_KEY is None
        assert settings.VIACEP_BASE_URL == "https://viacep.com.br"
