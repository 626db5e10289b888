"""FallbackOrchestrator: the single entry point for chart data.

Walks providers in priority order and, within each provider, its relays in
order. The first attempt that returns a usable result wins. Every
MarketDataError is logged and skipped; when all attempts are exhausted the
synthetic generator answers instead, so callers never see a provider
failure. Attempts run strictly one at a time.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Self, TypeVar

import structlog

from chartfeed.engine.candle_aggregator import CandleAggregator
from chartfeed.engine.indicators import IndicatorEngine
from chartfeed.engine.timeframes import TimeframeResolver
from chartfeed.feed.reference import DEFAULT_DIRECTORY, ReferenceDirectory
from chartfeed.feed.synthetic import MockDataGenerator
from chartfeed.market.errors import MarketDataError
from chartfeed.market.provider import MarketDataProvider
from chartfeed.market.transport import HttpTransport, Relay
from chartfeed.market.types import Candle, ChartSeries, SymbolQuote, timestamps_ascending
from chartfeed.utils.logging import new_correlation_id

log = structlog.get_logger()

T = TypeVar("T")

Attempt = Callable[[MarketDataProvider, Relay], Awaitable[T]]


class FallbackOrchestrator:
    """Provider -> relay -> synthetic fallback chain.

    The transport, when given, is shared by the providers; the orchestrator
    owns its lifecycle (``connect``/``disconnect`` or ``async with``).
    """

    def __init__(
        self,
        providers: Sequence[MarketDataProvider],
        *,
        resolver: TimeframeResolver | None = None,
        aggregator: CandleAggregator | None = None,
        engine: IndicatorEngine | None = None,
        generator: MockDataGenerator | None = None,
        directory: ReferenceDirectory = DEFAULT_DIRECTORY,
        transport: HttpTransport | None = None,
        max_candles: int = 500,
        search_limit: int = 10,
        quotes_enabled: bool = True,
    ) -> None:
        if max_candles < 1:
            raise ValueError(f"max_candles must be >= 1, got {max_candles}")
        self._providers = tuple(providers)
        self._resolver = resolver if resolver is not None else TimeframeResolver()
        self._aggregator = aggregator if aggregator is not None else CandleAggregator()
        self._engine = engine if engine is not None else IndicatorEngine()
        self._generator = (
            generator if generator is not None else MockDataGenerator(engine=self._engine)
        )
        self._directory = directory
        self._transport = transport
        self._max_candles = max_candles
        self._search_limit = search_limit
        self._quotes_enabled = quotes_enabled

    @property
    def providers(self) -> tuple[MarketDataProvider, ...]:
        return self._providers

    @property
    def resolver(self) -> TimeframeResolver:
        return self._resolver

    # -- Lifecycle --

    async def connect(self) -> None:
        if self._transport is not None:
            await self._transport.connect()

    async def disconnect(self) -> None:
        if self._transport is not None:
            await self._transport.disconnect()

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

    # -- Boundary --

    async def get_series(self, symbol: str, timeframe: str) -> ChartSeries:
        """Chart series for ``symbol`` at ``timeframe``. Never fails.

        Provider candles are aggregated by the resolved factor, trimmed to
        the newest ``max_candles`` and decorated with indicators.
        """
        clean = symbol.strip().upper()
        new_correlation_id(operation="series", symbol=clean)
        resolution = self._resolver.resolve(timeframe)
        log.debug(
            "series_requested",
            timeframe=timeframe,
            base=resolution.base,
            factor=resolution.factor,
        )

        candles = await self._first_success(
            lambda provider, relay: provider.get_series(clean, resolution, relay),
            _usable_candles,
        )
        if candles is not None:
            aggregated = self._aggregator.aggregate(candles, resolution.factor)
            return self._engine.build_series(aggregated[-self._max_candles:])

        reference = self._directory.lookup(clean)
        log.warning(
            "series_synthetic_fallback",
            timeframe=resolution.label,
            reference_price=reference.price if reference else None,
        )
        return self._generator.generate(
            clean,
            resolution,
            reference.price if reference else None,
        )

    async def get_quote(self, symbol: str) -> SymbolQuote | None:
        """Latest quote for ``symbol``.

        Returns None only when synthetic quotes are disabled and every
        provider failed.
        """
        clean = symbol.strip().upper()
        new_correlation_id(operation="quote", symbol=clean)

        quote = await self._first_success(
            lambda provider, relay: provider.get_quote(clean, relay),
            lambda q: q.price > 0,
        )
        if quote is not None:
            return quote

        if not self._quotes_enabled:
            log.warning("quote_unavailable")
            return None

        log.warning("quote_synthetic_fallback")
        return self._generator.generate_quote(clean, self._directory.lookup(clean))

    async def search(self, query: str) -> list[SymbolQuote]:
        """Best-effort symbol search; may return an empty list."""
        clean = query.strip()
        new_correlation_id(operation="search", query=clean)
        if not clean:
            return []

        results = await self._first_success(
            lambda provider, relay: provider.search_symbols(clean, relay),
            bool,
        )
        if results is not None:
            return results

        log.info("search_reference_fallback")
        return self._directory.search(clean, self._search_limit)

    # -- Internals --

    async def _first_success(
        self,
        attempt: Attempt[T],
        usable: Callable[[T], bool],
    ) -> T | None:
        """Run ``attempt`` over every provider/relay pair until one is usable."""
        for provider in self._providers:
            for relay in provider.relays:
                try:
                    result = await attempt(provider, relay)
                except MarketDataError as e:
                    log.warning(
                        "provider_attempt_failed",
                        provider=provider.name,
                        relay=relay.name,
                        error=type(e).__name__,
                        detail=str(e),
                    )
                    continue

                if not usable(result):
                    log.warning(
                        "provider_attempt_unusable",
                        provider=provider.name,
                        relay=relay.name,
                    )
                    continue

                log.info(
                    "provider_attempt_succeeded",
                    provider=provider.name,
                    relay=relay.name,
                )
                return result
        return None


def _usable_candles(candles: list[Candle]) -> bool:
    return (
        bool(candles)
        and all(candle.is_valid for candle in candles)
        and timestamps_ascending(candles)
    )
