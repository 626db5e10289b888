"""AlphaVantageProvider: quotes and candles from the Alpha Vantage query API.

Every endpoint is the same URL with a ``function`` parameter. The provider
is reached directly; there is a single relay.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from chartfeed.config import AlphaVantageConfig
from chartfeed.engine.timeframes import Resolution
from chartfeed.market.alphavantage.mappers import (
    av_quote_to_quote,
    av_search_to_quotes,
    av_series_to_candles,
    check_payload,
)
from chartfeed.market.transport import DIRECT, HttpTransport, Relay
from chartfeed.market.types import Candle, SymbolQuote
from chartfeed.market.utils import require_candles
from chartfeed.utils.time import now_ms

logger = structlog.get_logger()

# Base unit -> (function, intraday interval)
_FUNCTION_MAP: dict[str, tuple[str, str | None]] = {
    "1h": ("TIME_SERIES_INTRADAY", "60min"),
    "1d": ("TIME_SERIES_DAILY", None),
    "1w": ("TIME_SERIES_WEEKLY", None),
    "1M": ("TIME_SERIES_MONTHLY", None),
}


class AlphaVantageProvider:
    """MarketDataProvider backed by Alpha Vantage.

    Symbols are sent without exchange or currency suffixes
    ("RELIANCE.NS" -> "RELIANCE", "BTC-USD" -> "BTC").
    """

    name = "alphavantage"

    def __init__(self, config: AlphaVantageConfig, transport: HttpTransport) -> None:
        self._config = config
        self._transport = transport

    @property
    def relays(self) -> Sequence[Relay]:
        return (DIRECT,)

    def format_symbol(self, symbol: str) -> str:
        clean = symbol.strip().upper()
        for suffix in self._config.strip_suffixes:
            clean = clean.removesuffix(suffix.upper())
        return clean

    async def get_quote(self, symbol: str, relay: Relay = DIRECT) -> SymbolQuote:
        clean = self.format_symbol(symbol)
        payload = await self._query(
            {"function": "GLOBAL_QUOTE", "symbol": clean},
            timeout=self._config.timeouts.quote,
            relay=relay,
        )
        # The quote endpoint carries no company name
        return av_quote_to_quote(payload, symbol=symbol.strip().upper(), name=clean)

    async def get_series(
        self,
        symbol: str,
        resolution: Resolution,
        relay: Relay = DIRECT,
    ) -> list[Candle]:
        function, interval = _FUNCTION_MAP[resolution.base]
        params: dict[str, str] = {
            "function": function,
            "symbol": self.format_symbol(symbol),
            "outputsize": (
                "full"
                if resolution.lookback_bars > self._config.compact_limit
                else "compact"
            ),
        }
        if interval is not None:
            params["interval"] = interval

        payload = await self._query(
            params,
            timeout=self._config.timeouts.series,
            relay=relay,
        )
        candles = av_series_to_candles(
            payload,
            function,
            self._config.default_timezone,
        )

        # Full output reaches back decades; keep the requested window only
        cutoff = now_ms() - int(resolution.lookback.total_seconds() * 1000)
        candles = [c for c in candles if c.timestamp >= cutoff]
        return require_candles(candles, resolution.factor, self.name)

    async def search_symbols(
        self,
        query: str,
        relay: Relay = DIRECT,
    ) -> list[SymbolQuote]:
        payload = await self._query(
            {"function": "SYMBOL_SEARCH", "keywords": query},
            timeout=self._config.timeouts.search,
            relay=relay,
        )
        return av_search_to_quotes(
            payload,
            self._config.min_match_score,
            self._config.search_limit,
        )

    async def _query(
        self,
        params: dict[str, str],
        *,
        timeout: float,
        relay: Relay,
    ) -> dict[str, object]:
        """Call the query endpoint with the API key and check soft errors."""
        logger.debug("Alpha Vantage request", function=params["function"])
        payload = await self._transport.get_json(
            self._config.base_url,
            params={**params, "apikey": self._config.api_key},
            timeout=timeout,
            relay=relay,
        )
        return check_payload(payload)
