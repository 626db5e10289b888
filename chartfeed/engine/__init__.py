"""Engine layer: timeframe resolution, candle aggregation, indicators."""

from chartfeed.engine.candle_aggregator import CandleAggregator
from chartfeed.engine.indicators import SMA, IndicatorEngine, WilderRSI
from chartfeed.engine.timeframes import Resolution, TimeframeResolver

__all__ = [
    "SMA",
    "CandleAggregator",
    "IndicatorEngine",
    "Resolution",
    "TimeframeResolver",
    "WilderRSI",
]
