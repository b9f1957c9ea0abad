"""
Tests for logging formatters and request ID context.
"""

import json
import logging

from cep_common.logging_config import (
    HumanReadableFormatter,
    StructuredFormatter,
    clear_request_id,
    get_request_id,
    set_request_id,
)


def _record(message: str, **extra_fields) -> logging.LogRecord:
    record = logging.LogRecord(
        name="cep_gateway.app",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    if extra_fields:
        record.extra_fields = extra_fields
    return record


def test_request_id_context():
    request_id = set_request_id()
    assert get_request_id() == request_id

    set_request_id("abc-123")
    assert get_request_id() == "abc-123"

    clear_request_id()
    assert get_request_id() is None


def test_structured_formatter_outputs_json():
    set_request_id("req-1")
    try:
        line = StructuredFormatter("gateway-service").format(
            _record("Temperature resolved", city="São Paulo", temp_C=28.5)
        )
    finally:
        clear_request_id()

    data = json.loads(line)
    assert data["message"] == "Temperature resolved"
    assert data["service"] == "gateway-service"
    assert data["request_id"] == "req-1"
    assert data["city"] == "São Paulo"
    assert data["temp_C"] == 28.5


def test_human_readable_formatter_appends_fields():
    line = HumanReadableFormatter().format(_record("Rejected invalid CEP", cep="123"))

    assert "Rejected invalid CEP" in line
    assert "cep=123" in line
