"""HTTP transport shared by all provider adapters.

Transport selection is orthogonal to payload parsing: an adapter builds a
target URL and query parameters, a Relay decides how that request reaches
the provider (directly, or wrapped inside a relay URL), and HttpTransport
performs the GET and maps httpx failures onto the MarketDataError taxonomy.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Self
from urllib.parse import quote

import httpx
import structlog

from chartfeed.market.errors import (
    MalformedResponseError,
    ProviderAPIError,
    ProviderNetworkError,
    ProviderTimeoutError,
    RateLimitedError,
    SymbolNotFoundError,
    TransportNotConnectedError,
)

logger = structlog.get_logger()

DEFAULT_HEADERS = {"Accept": "application/json"}


@dataclass(frozen=True)
class Relay:
    """One network path to a provider.

    An empty prefix is a direct request. Otherwise the full target URL
    (query string included) is percent-encoded and appended to the prefix.
    """

    name: str
    prefix: str = ""

    @classmethod
    def from_prefix(cls, prefix: str) -> Relay:
        """Build a relay named after the prefix host."""
        if not prefix:
            return DIRECT
        return cls(name=httpx.URL(prefix).host or prefix, prefix=prefix)

    @property
    def is_direct(self) -> bool:
        return not self.prefix

    def target(self, url: str, params: dict[str, Any] | None = None) -> str:
        """The URL to request for ``url`` with ``params`` through this relay."""
        full = str(httpx.URL(url, params=params))
        if self.is_direct:
            return full
        return f"{self.prefix}{quote(full, safe='')}"


DIRECT = Relay(name="direct")


class HttpTransport:
    """Async JSON-over-HTTP client with per-call timeouts.

    Wraps one httpx.AsyncClient (a connection pool). Pass a preconfigured
    client, e.g. one built on httpx.MockTransport, to control the network
    in tests; the transport then leaves closing it to the caller.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the underlying client if none was supplied."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=DEFAULT_HEADERS,
                follow_redirects=True,
            )
            logger.debug("HTTP transport connected")

    async def disconnect(self) -> None:
        """Close the client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.debug("HTTP transport disconnected")

    async def get_json(
        self,
        url: str,
        *,
        timeout: float,
        params: dict[str, Any] | None = None,
        relay: Relay = DIRECT,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET ``url`` through ``relay`` and decode the JSON body.

        The whole call, including reading the body, is bounded by
        ``timeout`` seconds.

        Raises:
            ProviderTimeoutError: The call exceeded ``timeout``.
            ProviderNetworkError: Connection-level failure or unexpected status.
            RateLimitedError: HTTP 429.
            SymbolNotFoundError: HTTP 404.
            MalformedResponseError: Body is not JSON.
            TransportNotConnectedError: connect() was never called.
        """
        if self._client is None:
            raise TransportNotConnectedError("Transport not connected. Call connect() first.")

        target = relay.target(url, params)
        try:
            response = await asyncio.wait_for(
                self._client.get(target, headers=headers, timeout=timeout),
                timeout=timeout,
            )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise ProviderTimeoutError(
                f"Request to {url} via {relay.name} timed out after {timeout}s",
            ) from e
        except httpx.TransportError as e:
            raise ProviderNetworkError(
                f"Request to {url} via {relay.name} failed: {e}",
            ) from e

        _raise_for_status(response, url)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response from {url} is not JSON") from e

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.disconnect()


def _raise_for_status(response: httpx.Response, url: str) -> None:
    """Map HTTP error statuses to MarketDataError subclasses."""
    status = response.status_code
    if status < 400:
        return
    if status == 429:
        raise RateLimitedError(f"Rate limited by {url}")
    if status == 404:
        raise SymbolNotFoundError(f"Not found: {url}")
    raise ProviderAPIError(status, response.text[:200])
