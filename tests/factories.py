"""Shared test factories for creating domain objects.

Provides make_candle(), make_candles() and make_quote() with sensible
defaults so tests can focus on the values they care about.
"""

from __future__ import annotations

from collections.abc import Sequence

from chartfeed.market.types import Candle, SymbolQuote

# 2026-02-10 00:00 UTC in epoch milliseconds
DEFAULT_TIMESTAMP = 1_770_681_600_000
HOUR_MS = 3_600_000
DAY_MS = 86_400_000


def make_candle(
    *,
    timestamp: int = DEFAULT_TIMESTAMP,
    open: float = 150.0,
    high: float = 151.0,
    low: float = 149.0,
    close: float = 150.5,
    volume: int = 1000,
) -> Candle:
    """Create a Candle with sensible defaults."""
    return Candle(
        timestamp=timestamp,
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def make_candles(
    closes: Sequence[float],
    *,
    start: int = DEFAULT_TIMESTAMP,
    step_ms: int = DAY_MS,
    volume: int = 1000,
) -> list[Candle]:
    """Create consecutive valid candles, each opening at the prior close."""
    candles: list[Candle] = []
    prev = closes[0] if closes else 0.0
    for i, close in enumerate(closes):
        candles.append(
            Candle(
                timestamp=start + i * step_ms,
                open=prev,
                high=max(prev, close) + 0.5,
                low=min(prev, close) - 0.5,
                close=close,
                volume=volume,
            ),
        )
        prev = close
    return candles


def rising_closes(count: int, *, start: float = 100.0, step: float = 1.0) -> list[float]:
    """Strictly increasing closes."""
    return [start + i * step for i in range(count)]


def falling_closes(count: int, *, start: float = 200.0, step: float = 1.0) -> list[float]:
    """Strictly decreasing closes."""
    return [start - i * step for i in range(count)]


def make_quote(
    *,
    symbol: str = "AAPL",
    name: str = "Apple Inc.",
    price: float = 178.25,
    change: float = 2.15,
    change_percent: float = 1.22,
) -> SymbolQuote:
    """Create a SymbolQuote with sensible defaults."""
    return SymbolQuote(
        symbol=symbol,
        name=name,
        price=price,
        change=change,
        change_percent=change_percent,
    )
