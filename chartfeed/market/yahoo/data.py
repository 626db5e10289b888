"""YahooProvider: quotes and candles from the Yahoo chart API.

The chart API is not reliably reachable from every caller, so requests go
through an ordered list of relays from YahooConfig. The provider only
builds target URLs and parses payloads; the orchestrator walks the relays.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from chartfeed.config import YahooConfig
from chartfeed.engine.timeframes import Resolution
from chartfeed.market.transport import DIRECT, HttpTransport, Relay
from chartfeed.market.types import Candle, SymbolQuote
from chartfeed.market.utils import require_candles
from chartfeed.market.yahoo.mappers import (
    yahoo_chart_to_candles,
    yahoo_quote_to_quote,
    yahoo_search_to_quotes,
)

# Base unit -> Yahoo chart interval
_INTERVAL_MAP: dict[str, str] = {
    "1h": "1h",
    "1d": "1d",
    "1w": "1wk",
    "1M": "1mo",
}


class YahooProvider:
    """MarketDataProvider backed by the Yahoo chart and search endpoints."""

    name = "yahoo"

    def __init__(self, config: YahooConfig, transport: HttpTransport) -> None:
        self._config = config
        self._transport = transport
        self._relays = tuple(Relay.from_prefix(p) for p in config.relays)
        self._headers = {"User-Agent": config.user_agent}

    @property
    def relays(self) -> Sequence[Relay]:
        return self._relays

    def format_symbol(self, symbol: str) -> str:
        # Yahoo accepts suffixed tickers (".NS", "-USD", "=X", "^GSPC") as-is
        return symbol.strip().upper()

    async def get_quote(self, symbol: str, relay: Relay = DIRECT) -> SymbolQuote:
        payload = await self._chart(
            symbol,
            {"interval": self._config.quote_interval, "range": self._config.quote_range},
            timeout=self._config.timeouts.quote,
            relay=relay,
        )
        return yahoo_quote_to_quote(payload, symbol.strip().upper())

    async def get_series(
        self,
        symbol: str,
        resolution: Resolution,
        relay: Relay = DIRECT,
    ) -> list[Candle]:
        payload = await self._chart(
            symbol,
            {
                "interval": _INTERVAL_MAP[resolution.base],
                "range": f"{resolution.lookback.days}d",
            },
            timeout=self._config.timeouts.series,
            relay=relay,
        )
        candles = yahoo_chart_to_candles(payload)
        return require_candles(candles, resolution.factor, self.name)

    async def search_symbols(
        self,
        query: str,
        relay: Relay = DIRECT,
    ) -> list[SymbolQuote]:
        payload = await self._transport.get_json(
            self._config.search_url,
            params={"q": query},
            timeout=self._config.timeouts.search,
            relay=relay,
            headers=self._headers,
        )
        return yahoo_search_to_quotes(
            payload,
            self._config.search_types,
            self._config.search_limit,
        )

    async def _chart(
        self,
        symbol: str,
        params: dict[str, str],
        *,
        timeout: float,
        relay: Relay,
    ) -> Any:
        return await self._transport.get_json(
            f"{self._config.chart_url}/{self.format_symbol(symbol)}",
            params=params,
            timeout=timeout,
            relay=relay,
            headers=self._headers,
        )
