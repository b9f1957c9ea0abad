"""
Tests for the wire models.
"""

import pytest
from pydantic import ValidationError

from cep_common.models import (
    CepRequest,
    DirectoryLookupResult,
    TemperatureResult,
    WeatherLookupResult,
)


class TestCepRequest:
    def test_parses_cep(self):
        assert CepRequest.model_validate_json('{"cep": "01310100"}').cep == "01310100"

    def test_missing_cep_is_empty(self):
        assert CepRequest.model_validate_json("{}").cep == ""

    @pytest.mark.parametrize("body", ["", "not json", '{"cep": 1310100}', "[]", '{"cep": '])
    def test_malformed_bodies_are_rejected(self, body):
        with pytest.raises(ValidationError):
            CepRequest.model_validate_json(body)

    @pytest.mark.parametrize("key", ["CEP", "Cep", "cEp"])
    def test_key_matches_ignoring_case(self, key):
        assert CepRequest.model_validate({key: "01310100"}).cep == "01310100"

    def test_last_non_null_value_wins(self):
        data = {"cep": "11111111", "CEP": "01310100", "Cep": None}

        assert CepRequest.model_validate(data).cep == "01310100"


class TestCepRequestFromBody:
    """First-value decoding of the gateway request body"""

    @pytest.mark.parametrize("body", [b"null", b"  null", b'{"cep": null}'])
    def test_null_leaves_cep_empty(self, body):
        assert CepRequest.from_body(body).cep == ""

    @pytest.mark.parametrize(
        "body",
        [
            b'{"cep": "01310100"}\n{"cep": "99999999"}',
            b'{"cep": "01310100"}garbage',
            b'\t\r\n{"cep": "01310100"}',
        ],
    )
    def test_only_first_value_is_read(self, body):
        assert CepRequest.from_body(body).cep == "01310100"

    @pytest.mark.parametrize(
        "body", [b"", b"   ", b"not json", b'{"cep": 1310100}', b"[]", b'"01310100"', b'{"cep": ']
    )
    def test_malformed_bodies_raise_value_error(self, body):
        with pytest.raises(ValueError):
            CepRequest.from_body(body)


class TestDirectoryLookupResult:
    def test_parses_viacep_payload(self):
        payload = (
            '{"cep": "01310-100", "logradouro": "Avenida Paulista", '
            '"complemento": "de 612 a 1510 - lado par", "bairro": "Bela Vista", '
            '"localidade": "S\\u00e3o Paulo", "uf": "SP"}'
        )
        result = DirectoryLookupResult.model_validate_json(payload)

        assert result.city == "São Paulo"
        assert result.street == "Avenida Paulista"
        assert result.neighborhood == "Bela Vista"
        assert result.state == "SP"
        assert result.error is False

    @pytest.mark.parametrize("payload", ['{"erro": true}', '{"erro": "true"}'])
    def test_error_flag(self, payload):
        assert DirectoryLookupResult.model_validate_json(payload).error is True


class TestWeatherLookupResult:
    def test_parses_current_temperature(self):
        result = WeatherLookupResult.model_validate_json(
            '{"location": {"name": "Sao Paulo"}, "current": {"temp_c": 28.5}}'
        )
        assert result.location.name == "Sao Paulo"
        assert result.current.temp_c == 28.5

    def test_missing_current_is_rejected(self):
        with pytest.raises(ValidationError):
            WeatherLookupResult.model_validate_json('{"location": {"name": "x"}}')


class TestTemperatureResult:
    def test_round_trip_is_identical(self):
        original = TemperatureResult(city="São Paulo", temp_C=28.5, temp_F=83.3, temp_K=301.5)
        decoded = TemperatureResult.model_validate_json(original.model_dump_json())

        assert decoded == original
        assert decoded.model_dump() == {
            "city": "São Paulo",
            "temp_C": 28.5,
            "temp_F": 83.3,
            "temp_K": 301.5,
        }
