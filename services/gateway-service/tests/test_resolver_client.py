"""
Gateway Service Tests - Resolver Client Tests.

Tests for ResolverClient, including outbound headers, trace context
propagation and error handling.
"""

import httpx
import pytest

from cep_common.errors import ErrorKind, UpstreamServiceError
from cep_common.logging_config import clear_request_id, set_request_id
from cep_common.telemetry import Telemetry
from cep_gateway.resolver_client import ResolverClient


@pytest.fixture
def client(stub_resolver) -> ResolverClient:
    return ResolverClient(
        base_url="http://resolver.test/",
        transport=httpx.MockTransport(stub_resolver.handler),
    )


@pytest.mark.asyncio
async def test_fetch_temperature_sends_cep_header(client, stub_resolver) -> None:
    response = await client.fetch_temperature("01310100", Telemetry.disabled("gateway"))

    assert response.status_code == 200
    request = stub_resolver.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://resolver.test/temperature"
    assert request.headers["X-CEP"] == "01310100"
    assert request.headers["Content-Type"] == "application/json"
    await client.close()


@pytest.mark.asyncio
async def test_fetch_temperature_forwards_request_id(client, stub_resolver) -> None:
    set_request_id("req-7")
    try:
        await client.fetch_temperature("01310100", Telemetry.disabled("gateway"))
    finally:
        clear_request_id()

    assert stub_resolver.requests[0].headers["X-Request-ID"] == "req-7"


@pytest.mark.asyncio
async def test_fetch_temperature_injects_trace_context(
    client, stub_resolver, make_telemetry
) -> None:
    telemetry = make_telemetry("gateway-service")

    with telemetry.tracer.start_as_current_span("gateway.call_resolver") as span:
        await client.fetch_temperature("01310100", telemetry)

    traceparent = stub_resolver.requests[0].headers["traceparent"]
    trace_id = format(span.get_span_context().trace_id, "032x")
    assert traceparent.split("-")[1] == trace_id


@pytest.mark.asyncio
async def test_fetch_temperature_returns_error_responses(client, stub_resolver) -> None:
    stub_resolver.status_code = 404
    stub_resolver.body = {"error": "can not find zipcode"}

    response = await client.fetch_temperature("99999999", Telemetry.disabled("gateway"))

    assert response.status_code == 404
    assert response.json() == {"error": "can not find zipcode"}


@pytest.mark.asyncio
async def test_fetch_temperature_connection_error(client, stub_resolver) -> None:
    stub_resolver.error = httpx.ConnectError("Connection refused")

    with pytest.raises(UpstreamServiceError) as exc_info:
        await client.fetch_temperature("01310100", Telemetry.disabled("gateway"))

    assert exc_info.value.kind is ErrorKind.UPSTREAM_FAILURE
    assert "Connection refused" in exc_info.value.message


@pytest.mark.asyncio
async def test_fetch_temperature_timeout(client, stub_resolver) -> None:
    stub_resolver.error = httpx.ReadTimeout("timed out")

    with pytest.raises(UpstreamServiceError, match="timed out after 10.0s"):
        await client.fetch_temperature("01310100", Telemetry.disabled("gateway"))
