"""Shared test fixtures for chartfeed."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Callable

import httpx
import pytest

from chartfeed.market.transport import HttpTransport

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
async def mock_transport() -> AsyncIterator[Callable[[Handler], HttpTransport]]:
    """Build HttpTransports whose requests are answered by a handler.

    No request leaves the process. Clients are closed on teardown.
    """
    clients: list[httpx.AsyncClient] = []

    def _build(handler: Handler) -> HttpTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return HttpTransport(client)

    try:
        yield _build
    finally:
        for client in clients:
            await client.aclose()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHARTFEED_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CHARTFEED_"):
            monkeypatch.delenv(key)
