"""Indicator calculation: Wilder RSI, RSI moving average, Bollinger Bands.

SMA and WilderRSI are standalone streaming classes with O(1) per update.
IndicatorEngine runs them over a whole candle sequence and emits one
IndicatorPoint per candle.

Seed conventions (before a window is full) are presentation placeholders
kept for chart continuity:
- RSI is the neutral value 50 for indices < rsi_period.
- The RSI moving average passes the RSI value through.
- Bollinger Bands are RSI +/- 10.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Sequence

from chartfeed.market.types import Candle, ChartSeries, IndicatorPoint

NEUTRAL_RSI = 50.0
BB_SEED_OFFSET = 10.0


class SMA:
    """Simple Moving Average via ring buffer with running sum. O(1) per update.

    Note: Running-sum approach may accumulate negligible float drift over very
    long series. Chart series are capped at a few hundred points.
    """

    __slots__ = ("_buf", "_period", "_sum")

    def __init__(self, period: int) -> None:
        if period < 1:
            raise ValueError(f"SMA period must be >= 1, got {period}")
        self._period = period
        self._buf: deque[float] = deque(maxlen=period)
        self._sum: float = 0.0

    def update(self, value: float) -> None:
        """Add a value. Evicts oldest if at capacity."""
        if len(self._buf) == self._period:
            self._sum -= self._buf[0]
        self._buf.append(value)
        self._sum += value

    @property
    def value(self) -> float | None:
        """Current SMA, or None if not warm."""
        if len(self._buf) < self._period:
            return None
        return self._sum / self._period

    @property
    def is_warm(self) -> bool:
        """True when buffer has enough values for a valid SMA."""
        return len(self._buf) >= self._period

    @property
    def count(self) -> int:
        """Number of values currently in the buffer."""
        return len(self._buf)


class WilderRSI:
    """Relative Strength Index with Wilder's smoothing. O(1) per update.

    Carries (avg_gain, avg_loss) forward one close at a time. The first
    ``period`` deltas are summed and averaged to seed the smoothing; after
    that each average is ``(prev * (period - 1) + current) / period``.
    """

    __slots__ = (
        "_avg_gain",
        "_avg_loss",
        "_count",
        "_gain_sum",
        "_loss_sum",
        "_period",
        "_prev_close",
    )

    def __init__(self, period: int = 14) -> None:
        if period < 1:
            raise ValueError(f"RSI period must be >= 1, got {period}")
        self._period = period
        self._prev_close: float | None = None
        self._count = 0
        self._gain_sum = 0.0
        self._loss_sum = 0.0
        self._avg_gain = 0.0
        self._avg_loss = 0.0

    def update(self, close: float) -> float:
        """Add a close and return the RSI at this index."""
        index = self._count
        self._count += 1

        prev = self._prev_close
        self._prev_close = close
        if prev is None:
            return NEUTRAL_RSI

        gain = max(0.0, close - prev)
        loss = max(0.0, prev - close)

        if index < self._period:
            self._gain_sum += gain
            self._loss_sum += loss
            return NEUTRAL_RSI

        if index == self._period:
            self._avg_gain = (self._gain_sum + gain) / self._period
            self._avg_loss = (self._loss_sum + loss) / self._period
        else:
            keep = self._period - 1
            self._avg_gain = (self._avg_gain * keep + gain) / self._period
            self._avg_loss = (self._avg_loss * keep + loss) / self._period

        if self._avg_loss == 0:
            return 100.0
        rs = self._avg_gain / self._avg_loss
        return 100.0 - 100.0 / (1.0 + rs)

    @property
    def is_warm(self) -> bool:
        """True once the smoothing has been seeded."""
        return self._count > self._period

    @property
    def avg_gain(self) -> float:
        return self._avg_gain

    @property
    def avg_loss(self) -> float:
        return self._avg_loss


class IndicatorEngine:
    """Computes RSI, RSI-SMA and Bollinger Bands on RSI from candles."""

    def __init__(
        self,
        rsi_period: int = 14,
        ma_period: int = 14,
        bb_period: int = 20,
        bb_multiplier: float = 2.0,
    ) -> None:
        for name, period in (
            ("rsi_period", rsi_period),
            ("ma_period", ma_period),
            ("bb_period", bb_period),
        ):
            if period < 1:
                raise ValueError(f"{name} must be >= 1, got {period}")
        if bb_multiplier < 0:
            raise ValueError(f"bb_multiplier must be >= 0, got {bb_multiplier}")
        self.rsi_period = rsi_period
        self.ma_period = ma_period
        self.bb_period = bb_period
        self.bb_multiplier = bb_multiplier

    def rsi(self, closes: Sequence[float]) -> list[float]:
        """RSI for every close, neutral 50 inside the seed window."""
        calc = WilderRSI(self.rsi_period)
        return [calc.update(close) for close in closes]

    @staticmethod
    def rsi_sma(values: Sequence[float], period: int) -> list[float]:
        """Trailing simple mean; the value itself until the window fills."""
        sma = SMA(period)
        result: list[float] = []
        for value in values:
            sma.update(value)
            mean = sma.value
            result.append(value if mean is None else mean)
        return result

    def bollinger(self, values: Sequence[float]) -> tuple[list[float], list[float]]:
        """Upper and lower bands over the trailing bb_period window.

        Uses the population standard deviation around the window's SMA.
        """
        period = self.bb_period
        means = self.rsi_sma(values, period)
        upper: list[float] = []
        lower: list[float] = []
        window: deque[float] = deque(maxlen=period)

        for i, value in enumerate(values):
            window.append(value)
            if i < period - 1:
                upper.append(value + BB_SEED_OFFSET)
                lower.append(value - BB_SEED_OFFSET)
                continue
            mean = means[i]
            variance = sum((v - mean) ** 2 for v in window) / period
            spread = self.bb_multiplier * math.sqrt(variance)
            upper.append(mean + spread)
            lower.append(mean - spread)

        return upper, lower

    def compute(self, candles: Sequence[Candle]) -> list[IndicatorPoint]:
        """One IndicatorPoint per candle, timestamp-aligned."""
        values = self.rsi([c.close for c in candles])
        ma = self.rsi_sma(values, self.ma_period)
        upper, lower = self.bollinger(values)
        return [
            IndicatorPoint(
                timestamp=candle.timestamp,
                value=values[i],
                ma=ma[i],
                upper_bb=upper[i],
                lower_bb=lower[i],
            )
            for i, candle in enumerate(candles)
        ]

    def build_series(self, candles: Sequence[Candle]) -> ChartSeries:
        """Attach indicators to candles."""
        return ChartSeries(
            candles=tuple(candles),
            indicators=tuple(self.compute(candles)),
        )
