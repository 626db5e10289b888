"""FakeMarketDataProvider: in-memory market data for testing.

Lightweight implementation of MarketDataProvider for unit testing the
fallback orchestrator and anything downstream of it. Failures are scripted
per provider or per relay, and every call is recorded.
"""

from __future__ import annotations

from collections.abc import Sequence

from chartfeed.engine.timeframes import Resolution
from chartfeed.market.errors import NoDataAvailableError, SymbolNotFoundError
from chartfeed.market.transport import DIRECT, Relay
from chartfeed.market.types import Candle, SymbolQuote


class FakeMarketDataProvider:
    """In-memory MarketDataProvider for testing.

    Supply canned quotes/candles/search results at construction. ``error``
    is raised by every call; ``relay_errors`` raises only for the named
    relays. ``calls`` records ``(method, argument, relay name)`` tuples.
    """

    def __init__(
        self,
        name: str = "fake",
        *,
        quotes: dict[str, SymbolQuote] | None = None,
        candles: dict[str, list[Candle]] | None = None,
        search_results: list[SymbolQuote] | None = None,
        relays: Sequence[Relay] | None = None,
        error: Exception | None = None,
        relay_errors: dict[str, Exception] | None = None,
    ) -> None:
        self.name = name
        self._quotes = quotes if quotes is not None else {}
        self._candles = candles if candles is not None else {}
        self._search_results = search_results if search_results is not None else []
        self._relays = tuple(relays) if relays is not None else (DIRECT,)
        self._error = error
        self._relay_errors = relay_errors if relay_errors is not None else {}
        self.calls: list[tuple[str, str, str]] = []

    @property
    def relays(self) -> Sequence[Relay]:
        return self._relays

    def _record(self, method: str, argument: str, relay: Relay) -> None:
        self.calls.append((method, argument, relay.name))
        if relay.name in self._relay_errors:
            raise self._relay_errors[relay.name]
        if self._error is not None:
            raise self._error

    async def get_quote(self, symbol: str, relay: Relay = DIRECT) -> SymbolQuote:
        self._record("get_quote", symbol, relay)
        if symbol not in self._quotes:
            raise SymbolNotFoundError(f"{self.name}: no quote for {symbol}")
        return self._quotes[symbol]

    async def get_series(
        self,
        symbol: str,
        resolution: Resolution,
        relay: Relay = DIRECT,
    ) -> list[Candle]:
        self._record("get_series", symbol, relay)
        candles = self._candles.get(symbol)
        if not candles:
            raise NoDataAvailableError(f"{self.name}: no candles for {symbol}")
        return list(candles)

    async def search_symbols(
        self,
        query: str,
        relay: Relay = DIRECT,
    ) -> list[SymbolQuote]:
        self._record("search_symbols", query, relay)
        return list(self._search_results)
