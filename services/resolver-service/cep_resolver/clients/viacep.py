"""
Client for the ViaCEP postal directory API.

Resolves a CEP to its address record. A 400 from ViaCEP means the code is
malformed; a payload with ``erro`` set means the code does not exist.
"""

import time
from typing import Optional

import httpx
from pydantic import ValidationError

from cep_common.errors import InvalidZipcodeError, UpstreamServiceError, ZipcodeNotFoundError
from cep_common.logging_config import get_logger
from cep_common.models import DirectoryLookupResult
from cep_common.tracing_utils import add_span_attributes

from ..metrics import track_upstream_call
from .base import ExternalApiClient

logger = get_logger(__name__)


class DirectoryClient(ExternalApiClient):
    """Client for ``GET /ws/{cep}/json/`` on ViaCEP."""

    upstream_name = "viacep"

    def __init__(
        self,
        base_url: str = "https://viacep.com.br",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout, transport)

    def lookup_url(self, cep: str) -> str:
        return f"{self.base_url}/ws/{cep}/json/"

    async def lookup(self, cep: str) -> DirectoryLookupResult:
        """
        Look up the address record for a CEP.

        Args:
            cep: Validated 8-digit postal code

        Returns:
            Address record with the resolved city

        Raises:
            InvalidZipcodeError: ViaCEP rejected the code (HTTP 400)
            ZipcodeNotFoundError: ViaCEP has no record for the code
            UpstreamServiceError: Transport or decode failure
        """
        url = self.lookup_url(cep)
        add_span_attributes({"http.method": "GET", "http.url": url})

        start_time = time.perf_counter()
        try:
            client = await self._get_client()
            response = await client.get(url, headers=self._get_request_headers())
        except httpx.RequestError as error:
            duration = time.perf_counter() - start_time
            track_upstream_call(self.upstream_name, "transport_error", duration)
            logger.error(
                "Request to directory API failed",
                extra={
                    "extra_fields": {
                        "cep": cep,
                        "url": url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            raise UpstreamServiceError(
                self.upstream_name, str(error) or type(error).__name__
            ) from error

        duration = time.perf_counter() - start_time
        add_span_attributes({"http.status_code": response.status_code})

        if response.status_code == httpx.codes.BAD_REQUEST:
            track_upstream_call(self.upstream_name, "invalid", duration)
            raise InvalidZipcodeError(cep)

        try:
            result = DirectoryLookupResult.model_validate_json(response.content)
        except ValidationError as error:
            track_upstream_call(self.upstream_name, "decode_error", duration)
            logger.error(
                "Could not decode directory API response",
                extra={
                    "extra_fields": {
                        "cep": cep,
                        "status_code": response.status_code,
                        "response_body": response.text[:500],
                    }
                },
            )
            raise UpstreamServiceError(
                self.upstream_name,
                f"failed to decode directory response: {error}",
                status_code=response.status_code,
            ) from error

        if result.error:
            track_upstream_call(self.upstream_name, "not_found", duration)
            raise ZipcodeNotFoundError(cep)

        track_upstream_call(self.upstream_name, "success", duration)
        logger.info(
            f"CEP search took {duration * 1000:.2f}ms",
            extra={"extra_fields": {"cep": cep, "city": result.city}},
        )

        return result
