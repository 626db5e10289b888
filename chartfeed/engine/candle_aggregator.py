"""Candle aggregation from base-interval candles to compound timeframes.

Batch-based: aggregate() partitions an ascending candle sequence into
consecutive buckets of ``factor`` candles. The final bucket may be short
and is still emitted.
"""

from __future__ import annotations

from collections.abc import Sequence

from chartfeed.market.types import Candle


class CandleAggregator:
    """Merges base-unit candles into coarser buckets.

    Buckets are counted from the first candle, not aligned to calendar
    boundaries: a "3h" series is every three consecutive hourly candles.
    """

    def aggregate(self, candles: Sequence[Candle], factor: int) -> list[Candle]:
        """Aggregate candles into buckets of ``factor``. factor=1 is identity."""
        if factor < 1:
            raise ValueError(f"factor must be >= 1, got {factor}")
        if factor == 1:
            return list(candles)
        return [
            self._merge(candles[start : start + factor])
            for start in range(0, len(candles), factor)
        ]

    @staticmethod
    def _merge(bucket: Sequence[Candle]) -> Candle:
        """Build one candle from a non-empty bucket."""
        first = bucket[0]
        return Candle(
            timestamp=first.timestamp,
            open=first.open,
            high=max(c.high for c in bucket),
            low=min(c.low for c in bucket),
            close=bucket[-1].close,
            volume=sum(c.volume for c in bucket),
        )
