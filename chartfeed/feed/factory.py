"""Wires a FallbackOrchestrator from AppConfig."""

from __future__ import annotations

import random

import structlog

from chartfeed.config import AppConfig
from chartfeed.engine.candle_aggregator import CandleAggregator
from chartfeed.engine.indicators import IndicatorEngine
from chartfeed.engine.timeframes import TimeframeResolver
from chartfeed.feed.orchestrator import FallbackOrchestrator
from chartfeed.feed.reference import DEFAULT_DIRECTORY
from chartfeed.feed.synthetic import MockDataGenerator
from chartfeed.market.alphavantage import AlphaVantageProvider
from chartfeed.market.errors import ConfigurationError
from chartfeed.market.finnhub import FinnhubProvider
from chartfeed.market.provider import MarketDataProvider
from chartfeed.market.transport import HttpTransport
from chartfeed.market.yahoo import YahooProvider

log = structlog.get_logger()


def build_provider(
    name: str,
    config: AppConfig,
    transport: HttpTransport,
) -> MarketDataProvider:
    """Instantiate one provider adapter by its configured name.

    Raises:
        ConfigurationError: Unknown provider name.
    """
    if name == "alphavantage":
        return AlphaVantageProvider(config.alphavantage, transport)
    if name == "finnhub":
        return FinnhubProvider(config.finnhub, transport)
    if name == "yahoo":
        return YahooProvider(config.yahoo, transport)
    raise ConfigurationError(f"Unknown provider: {name!r}")


def build_orchestrator(
    config: AppConfig,
    transport: HttpTransport | None = None,
    rng: random.Random | None = None,
) -> FallbackOrchestrator:
    """Build providers in priority order around one shared transport.

    Raises:
        ConfigurationError: No providers configured, or an unknown one.
    """
    if not config.providers:
        raise ConfigurationError("No market data providers configured")

    transport = transport if transport is not None else HttpTransport()
    providers = [build_provider(name, config, transport) for name in config.providers]

    ind = config.indicators
    try:
        engine = IndicatorEngine(
            rsi_period=ind.rsi_period,
            ma_period=ind.ma_period,
            bb_period=ind.bb_period,
            bb_multiplier=ind.bb_multiplier,
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    log.info(
        "orchestrator_built",
        providers=config.providers,
        quotes_enabled=config.synthetic.quotes_enabled,
    )
    return FallbackOrchestrator(
        providers,
        resolver=TimeframeResolver(config.timeframes),
        aggregator=CandleAggregator(),
        engine=engine,
        generator=MockDataGenerator(config.synthetic, engine, rng),
        directory=DEFAULT_DIRECTORY,
        transport=transport,
        max_candles=config.max_candles,
        search_limit=config.search_limit,
        quotes_enabled=config.synthetic.quotes_enabled,
    )
