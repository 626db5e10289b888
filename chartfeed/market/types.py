"""Market data domain types shared across providers and the chart pipeline.

Frozen dataclasses only: every value is built fresh per fetch and never
mutated. Prices are floats, timestamps are integer milliseconds since epoch.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Candle:
    """OHLCV bar for one time bucket."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def is_valid(self) -> bool:
        """True when high/low contain open/close and volume is non-negative."""
        return (
            self.high >= max(self.open, self.close)
            and self.low <= min(self.open, self.close)
            and self.volume >= 0
        )


@dataclass(frozen=True)
class SymbolQuote:
    """Latest price snapshot for a symbol.

    Search results reuse this type with the price fields zeroed.
    """

    symbol: str
    name: str
    price: float
    change: float
    change_percent: float

    @classmethod
    def search_hit(cls, symbol: str, name: str) -> SymbolQuote:
        """Build a search result: only symbol and name are populated."""
        return cls(symbol=symbol, name=name, price=0.0, change=0.0, change_percent=0.0)


def change_percent(price: float, change: float) -> float:
    """Percent change relative to the pre-change price (price - change)."""
    previous = price - change
    if change == 0 or previous == 0:
        return 0.0
    return change / previous * 100


@dataclass(frozen=True)
class IndicatorPoint:
    """RSI value with its moving average and Bollinger Bands."""

    timestamp: int
    value: float
    ma: float
    upper_bb: float
    lower_bb: float


@dataclass(frozen=True)
class ChartSeries:
    """Candles and their index-aligned indicator points.

    Candle timestamps are strictly ascending; construction rejects
    misaligned, unordered or duplicate input.
    """

    candles: tuple[Candle, ...] = field(default_factory=tuple)
    indicators: tuple[IndicatorPoint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.candles) != len(self.indicators):
            raise ValueError(
                f"candles and indicators must align, got "
                f"{len(self.candles)} candles and {len(self.indicators)} points"
            )
        if not timestamps_ascending(self.candles):
            raise ValueError("candle timestamps must be strictly ascending")

    def __len__(self) -> int:
        return len(self.candles)


def timestamps_ascending(candles: Sequence[Candle]) -> bool:
    """True when timestamps strictly increase (no duplicates)."""
    return all(a.timestamp < b.timestamp for a, b in zip(candles, candles[1:]))
