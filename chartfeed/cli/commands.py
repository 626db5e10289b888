"""Click CLI commands for chartfeed."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from typing import TypeVar

import click
from pydantic import ValidationError

from chartfeed.config import AppConfig
from chartfeed.engine.timeframes import TimeframeResolver
from chartfeed.feed.factory import build_orchestrator
from chartfeed.feed.orchestrator import FallbackOrchestrator
from chartfeed.feed.reference import POPULAR_SYMBOLS
from chartfeed.market.errors import ConfigurationError
from chartfeed.market.types import ChartSeries, SymbolQuote
from chartfeed.utils.logging import setup_logging
from chartfeed.utils.time import format_timestamp, from_epoch_ms

T = TypeVar("T")


@click.group()
def cli() -> None:
    """Chartfeed: market quotes, candles and RSI from fallback providers."""


def _load_config() -> AppConfig:
    try:
        cfg = AppConfig()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    setup_logging(cfg.log_level, cfg.log_format)
    return cfg


def _run(cfg: AppConfig, call: Callable[[FallbackOrchestrator], Awaitable[T]]) -> T:
    """Build an orchestrator, run one call inside its lifecycle."""
    try:
        orchestrator = build_orchestrator(cfg)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    async def _main() -> T:
        async with orchestrator:
            return await call(orchestrator)

    return asyncio.run(_main())


@cli.command()
@click.argument("symbol")
def quote(symbol: str) -> None:
    """Show the latest quote for SYMBOL."""
    cfg = _load_config()
    result = _run(cfg, lambda o: o.get_quote(symbol))
    if result is None:
        raise click.ClickException(f"No quote available for {symbol.upper()}, retry later.")
    click.echo(_format_quote(result))


@cli.command()
@click.argument("symbol")
@click.option(
    "-t", "--timeframe", default="1d", show_default=True, help="Timeframe label (e.g. 1h, 3d, 1M)."
)
@click.option(
    "--limit", default=20, show_default=True, type=click.IntRange(min=1),
    help="Number of most recent candles to print.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full series as JSON.")
def series(symbol: str, timeframe: str, limit: int, as_json: bool) -> None:
    """Show candles and RSI for SYMBOL."""
    cfg = _load_config()
    result = _run(cfg, lambda o: o.get_series(symbol, timeframe))
    if as_json:
        click.echo(json.dumps(_series_to_json(result)))
        return
    _print_series(symbol.upper(), timeframe, result, limit)


@cli.command()
@click.argument("query")
def search(query: str) -> None:
    """Search tickers matching QUERY."""
    cfg = _load_config()
    results = _run(cfg, lambda o: o.search(query))
    if not results:
        click.echo("No matches.")
        return
    for hit in results:
        click.echo(f"{hit.symbol:<14} {hit.name}")


@cli.command()
@click.argument("timeframe")
def resolve(timeframe: str) -> None:
    """Show how TIMEFRAME maps to a base unit and aggregation factor."""
    cfg = _load_config()
    resolution = TimeframeResolver(cfg.timeframes).resolve(timeframe)
    click.echo(f"Label:     {resolution.label}")
    click.echo(f"Base:      {resolution.base}")
    click.echo(f"Factor:    {resolution.factor}")
    click.echo(f"Interval:  {resolution.interval_ms} ms")
    click.echo(f"Lookback:  {resolution.lookback.days} days")


@cli.command()
@click.argument("group", required=False)
def popular(group: str | None) -> None:
    """List popular symbols, optionally for one GROUP."""
    if group is None:
        groups = list(POPULAR_SYMBOLS)
    elif group.upper() in POPULAR_SYMBOLS:
        groups = [group.upper()]
    else:
        raise click.ClickException(
            f"Unknown group {group!r}. Available: {', '.join(POPULAR_SYMBOLS)}"
        )
    for name in groups:
        click.echo(f"{name}: {', '.join(POPULAR_SYMBOLS[name])}")


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = _load_config()

    click.echo("=== Chartfeed Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo(f"Providers:    {', '.join(cfg.providers)}")
    click.echo(f"Max Candles:  {cfg.max_candles}")
    click.echo("")

    click.echo("[Alpha Vantage]")
    click.echo(f"  Base URL:   {cfg.alphavantage.base_url}")
    click.echo(f"  API Key:    {_mask(cfg.alphavantage.api_key)}")
    click.echo("")

    click.echo("[Finnhub]")
    click.echo(f"  Base URL:   {cfg.finnhub.base_url}")
    click.echo(f"  API Key:    {_mask(cfg.finnhub.api_key)}")
    click.echo("")

    click.echo("[Yahoo]")
    click.echo(f"  Chart URL:  {cfg.yahoo.chart_url}")
    click.echo(f"  Relays:     {', '.join(r or 'direct' for r in cfg.yahoo.relays)}")
    click.echo("")

    ind = cfg.indicators
    click.echo("[Indicators]")
    click.echo(f"  RSI Period:     {ind.rsi_period}")
    click.echo(f"  MA Period:      {ind.ma_period}")
    click.echo(f"  BB Period:      {ind.bb_period}")
    click.echo(f"  BB Multiplier:  {ind.bb_multiplier}")
    click.echo("")

    click.echo("[Synthetic]")
    click.echo(f"  Periods:        {cfg.synthetic.periods}")
    click.echo(f"  Quotes Enabled: {cfg.synthetic.quotes_enabled}")


def _mask(key: str) -> str:
    if not key:
        return "(not set)"
    return key[:2] + "*" * max(len(key) - 2, 0)


def _format_quote(q: SymbolQuote) -> str:
    return (
        f"{q.symbol}  {q.name}  {q.price:,.2f}  "
        f"{q.change:+,.2f} ({q.change_percent:+.2f}%)"
    )


def _series_to_json(result: ChartSeries) -> list[dict[str, object]]:
    return [
        {**asdict(candle), "rsi": point.value, "ma": point.ma,
         "upper_bb": point.upper_bb, "lower_bb": point.lower_bb}
        for candle, point in zip(result.candles, result.indicators, strict=True)
    ]


def _print_series(symbol: str, timeframe: str, result: ChartSeries, limit: int) -> None:
    click.echo(f"{symbol} {timeframe}: {len(result)} candles\n")
    click.echo(
        f"{'Time':<28} {'Open':>10} {'High':>10} {'Low':>10} {'Close':>10} "
        f"{'Volume':>12} {'RSI':>6} {'MA':>6} {'BB+':>6} {'BB-':>6}"
    )
    rows = list(zip(result.candles, result.indicators, strict=True))[-limit:]
    for candle, point in rows:
        click.echo(
            f"{format_timestamp(from_epoch_ms(candle.timestamp)):<28} "
            f"{candle.open:>10.2f} {candle.high:>10.2f} {candle.low:>10.2f} "
            f"{candle.close:>10.2f} {candle.volume:>12} {point.value:>6.1f} "
            f"{point.ma:>6.1f} {point.upper_bb:>6.1f} {point.lower_bb:>6.1f}"
        )
