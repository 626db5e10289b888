"""MarketDataProvider protocol: interface every provider adapter satisfies.

All provider variants (Alpha Vantage, Finnhub, Yahoo, fake) implement this
protocol independently; the fallback orchestrator only talks to it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from chartfeed.engine.timeframes import Resolution
from chartfeed.market.transport import DIRECT, Relay
from chartfeed.market.types import Candle, SymbolQuote


@runtime_checkable
class MarketDataProvider(Protocol):
    """Async interface for quotes, historical candles and symbol search.

    ``relays`` lists the network paths to this provider in the order they
    should be tried. Providers reachable directly expose ``[DIRECT]``.
    Every method raises a MarketDataError subclass on failure.
    """

    name: str

    @property
    def relays(self) -> Sequence[Relay]:
        """Network paths to the provider, in priority order."""
        ...

    async def get_quote(self, symbol: str, relay: Relay = DIRECT) -> SymbolQuote:
        """Fetch the latest quote for a canonical ticker.

        Raises:
            SymbolNotFoundError, RateLimitedError, ProviderNetworkError,
            ProviderTimeoutError, MalformedResponseError.
        """
        ...

    async def get_series(
        self,
        symbol: str,
        resolution: Resolution,
        relay: Relay = DIRECT,
    ) -> list[Candle]:
        """Fetch base-unit candles covering ``resolution.lookback``.

        Returns:
            Normalized candles, ascending by timestamp, not yet aggregated.
            At least ``resolution.factor`` candles.

        Raises:
            Same as get_quote, plus NoDataAvailableError.
        """
        ...

    async def search_symbols(
        self,
        query: str,
        relay: Relay = DIRECT,
    ) -> list[SymbolQuote]:
        """Search tickers. Results carry symbol and name, prices zeroed."""
        ...
