"""
HTTP client module for the resolver service API.

Forwards a validated CEP to the resolver's ``/temperature`` endpoint with
the request ID and the current trace context attached. The raw response is
returned so the gateway can relay resolver errors unchanged.
"""

import time
from typing import Dict, Optional

import httpx

from cep_common.errors import UpstreamServiceError
from cep_common.logging_config import get_logger, get_request_id
from cep_common.telemetry import Telemetry

from .metrics import track_resolver_error, track_resolver_request

logger = get_logger(__name__)

CEP_HEADER = "X-CEP"


class ResolverClient:
    """
    Client for the resolver service.

    Attributes:
        base_url: Base URL of the resolver service
        timeout: Request timeout in seconds
        _transport: Optional transport override, used to stub the resolver
        _client: Persistent httpx.AsyncClient
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize resolver client.

        Args:
            base_url: Base URL of the resolver service
            timeout: Request timeout in seconds
            transport: Transport override for the underlying httpx client
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized ResolverClient: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the persistent HTTP client.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def close(self) -> None:
        """
        Close the HTTP client and release connections.

        Should be called during application shutdown.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self, cep: str, telemetry: Telemetry) -> Dict[str, str]:
        """
        Build outbound headers for a temperature request.

        Args:
            cep: Validated CEP to forward
            telemetry: Tracing handle whose propagator injects the context

        Returns:
            Dictionary of HTTP headers
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            CEP_HEADER: cep,
        }

        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        telemetry.inject(headers)
        return headers

    async def fetch_temperature(self, cep: str, telemetry: Telemetry) -> httpx.Response:
        """
        Ask the resolver for the temperature of a CEP.

        Args:
            cep: Validated 8-digit postal code
            telemetry: Tracing handle of the current request

        Returns:
            The resolver's response, whatever its status code

        Raises:
            UpstreamServiceError: The resolver could not be reached or timed out
        """
        request_url = f"{self.base_url}/temperature"
        start_time = time.perf_counter()

        try:
            client = await self._get_client()
            response = await client.post(
                request_url,
                headers=self._get_request_headers(cep, telemetry),
            )
        except httpx.TimeoutException as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_resolver_error("timeout")
            logger.error(
                "Resolver request timed out",
                extra={
                    "extra_fields": {
                        "cep": cep,
                        "timeout": self.timeout,
                        "duration_ms": duration_ms,
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                    }
                },
            )
            raise UpstreamServiceError(
                "resolver-service",
                f"resolver request timed out after {self.timeout}s",
            ) from error
        except httpx.RequestError as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_resolver_error("connection_error")
            logger.error(
                "Connection error to resolver service",
                extra={
                    "extra_fields": {
                        "cep": cep,
                        "backend_url": self.base_url,
                        "duration_ms": duration_ms,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
                exc_info=True,
            )
            raise UpstreamServiceError(
                "resolver-service", str(error) or type(error).__name__
            ) from error

        duration = time.perf_counter() - start_time
        track_resolver_request(response.status_code, duration)

        logger.info(
            "Received response from resolver service",
            extra={
                "extra_fields": {
                    "status_code": response.status_code,
                    "duration_ms": duration * 1000,
                    "response_size": len(response.content),
                }
            },
        )

        return response
