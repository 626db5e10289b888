"""FinnhubProvider: quotes and candles from the Finnhub REST API.

Requests carry the API key as the ``token`` query parameter. Crypto
tickers are remapped to exchange pairs ("BTC" -> "BINANCE:BTCUSDT").
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any

import structlog

from chartfeed.config import FinnhubConfig
from chartfeed.engine.timeframes import Resolution
from chartfeed.market.errors import MarketDataError
from chartfeed.market.finnhub.mappers import (
    finnhub_candles_to_candles,
    finnhub_profile_name,
    finnhub_quote_to_quote,
    finnhub_search_to_quotes,
)
from chartfeed.market.transport import DIRECT, HttpTransport, Relay
from chartfeed.market.types import Candle, SymbolQuote
from chartfeed.market.utils import require_candles
from chartfeed.utils.time import utc_now

logger = structlog.get_logger()

# Base unit -> Finnhub resolution
_RESOLUTION_MAP: dict[str, str] = {
    "1h": "60",
    "1d": "D",
    "1w": "W",
    "1M": "M",
}


class FinnhubProvider:
    """MarketDataProvider backed by Finnhub."""

    name = "finnhub"

    def __init__(self, config: FinnhubConfig, transport: HttpTransport) -> None:
        self._config = config
        self._transport = transport

    @property
    def relays(self) -> Sequence[Relay]:
        return (DIRECT,)

    def format_symbol(self, symbol: str) -> str:
        clean = symbol.strip().upper()
        return self._config.crypto_symbols.get(clean, clean)

    async def get_quote(self, symbol: str, relay: Relay = DIRECT) -> SymbolQuote:
        formatted = self.format_symbol(symbol)
        payload = await self._get(
            "/quote",
            {"symbol": formatted},
            timeout=self._config.timeouts.quote,
            relay=relay,
        )
        canonical = symbol.strip().upper()
        quote = finnhub_quote_to_quote(payload, symbol=canonical, name=canonical)
        name = await self._company_name(formatted, relay)
        if name is None:
            return quote
        return replace(quote, name=name)

    async def get_series(
        self,
        symbol: str,
        resolution: Resolution,
        relay: Relay = DIRECT,
    ) -> list[Candle]:
        to_ts = int(utc_now().timestamp())
        from_ts = to_ts - int(resolution.lookback.total_seconds())
        payload = await self._get(
            "/stock/candle",
            {
                "symbol": self.format_symbol(symbol),
                "resolution": _RESOLUTION_MAP[resolution.base],
                "from": str(from_ts),
                "to": str(to_ts),
            },
            timeout=self._config.timeouts.series,
            relay=relay,
        )
        candles = finnhub_candles_to_candles(payload)
        return require_candles(candles, resolution.factor, self.name)

    async def search_symbols(
        self,
        query: str,
        relay: Relay = DIRECT,
    ) -> list[SymbolQuote]:
        payload = await self._get(
            "/search",
            {"q": query},
            timeout=self._config.timeouts.search,
            relay=relay,
        )
        return finnhub_search_to_quotes(
            payload,
            self._config.search_types,
            self._config.search_limit,
        )

    async def _company_name(self, formatted: str, relay: Relay) -> str | None:
        """Best-effort company name lookup; a failure keeps the ticker."""
        try:
            payload = await self._get(
                "/stock/profile2",
                {"symbol": formatted},
                timeout=self._config.profile_timeout,
                relay=relay,
            )
        except MarketDataError as e:
            logger.debug(
                "Finnhub profile lookup failed",
                symbol=formatted,
                error=type(e).__name__,
            )
            return None
        return finnhub_profile_name(payload)

    async def _get(
        self,
        path: str,
        params: dict[str, str],
        *,
        timeout: float,
        relay: Relay,
    ) -> Any:
        return await self._transport.get_json(
            f"{self._config.base_url}{path}",
            params={**params, "token": self._config.api_key},
            timeout=timeout,
            relay=relay,
        )
