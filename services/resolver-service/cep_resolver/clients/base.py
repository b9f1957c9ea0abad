"""
Shared plumbing for the external API clients.

Each client owns one lazily created ``httpx.AsyncClient`` that is closed on
application shutdown.
"""

from typing import Dict, Optional

import httpx

from cep_common.logging_config import get_logger

logger = get_logger(__name__)


class ExternalApiClient:
    """
    Base class for clients of third-party HTTP APIs.

    Attributes:
        base_url: Base URL of the API
        timeout: Request timeout in seconds
        _transport: Optional transport override, used to stub the API
        _client: Persistent httpx.AsyncClient
    """

    upstream_name = "external"

    def __init__(
        self,
        base_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized {type(self).__name__}: base_url={self.base_url}, "
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
            )
            logger.debug(f"Created HTTP client for {self.upstream_name}")
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug(f"Closed HTTP client for {self.upstream_name}")

    def _get_request_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": "CEP-Resolver/1.0",
            "Accept": "application/json",
        }
