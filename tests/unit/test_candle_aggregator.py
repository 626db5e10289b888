"""Tests for CandleAggregator."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from chartfeed.engine.candle_aggregator import CandleAggregator
from chartfeed.market.types import Candle
from tests.factories import HOUR_MS, make_candle, make_candles

# --- Helpers ---

_price = st.floats(min_value=0.01, max_value=10_000, allow_nan=False, allow_infinity=False)
_wick = st.floats(min_value=0, max_value=50, allow_nan=False, allow_infinity=False)


@st.composite
def candle_lists(draw: st.DrawFn, min_size: int = 0, max_size: int = 60) -> list[Candle]:
    """Ascending hourly candles that satisfy the OHLC invariants."""
    rows = draw(
        st.lists(
            st.tuples(_price, _price, _wick, _wick, st.integers(0, 10_000_000)),
            min_size=min_size,
            max_size=max_size,
        ),
    )
    return [
        Candle(
            timestamp=i * HOUR_MS,
            open=o,
            high=max(o, c) + up,
            low=min(o, c) - down,
            close=c,
            volume=v,
        )
        for i, (o, c, up, down, v) in enumerate(rows)
    ]


@pytest.fixture()
def agg() -> CandleAggregator:
    return CandleAggregator()


# --- Factor validation ---


class TestFactorValidation:
    """Factor must be a positive integer."""

    def test_rejects_zero(self, agg: CandleAggregator) -> None:
        with pytest.raises(ValueError, match="factor"):
            agg.aggregate([make_candle()], 0)

    def test_rejects_negative(self, agg: CandleAggregator) -> None:
        with pytest.raises(ValueError, match="factor"):
            agg.aggregate([make_candle()], -2)

    def test_factor_one_is_identity(self, agg: CandleAggregator) -> None:
        candles = make_candles([100.0, 101.0, 99.0])
        assert agg.aggregate(candles, 1) == candles

    def test_factor_one_returns_new_list(self, agg: CandleAggregator) -> None:
        candles = make_candles([100.0, 101.0])
        result = agg.aggregate(candles, 1)
        assert result is not candles

    def test_empty_input(self, agg: CandleAggregator) -> None:
        assert agg.aggregate([], 3) == []


# --- Bucket merging ---


class TestBucketMerge:
    """Each bucket keeps first open/time, extreme high/low, last close."""

    def test_three_hourly_candles_into_one(self, agg: CandleAggregator) -> None:
        candles = [
            make_candle(timestamp=0, open=10.0, high=12.0, low=9.0, close=11.0, volume=100),
            make_candle(timestamp=HOUR_MS, open=11.0, high=15.0, low=10.5, close=14.0, volume=200),
            make_candle(timestamp=2 * HOUR_MS, open=14.0, high=14.5, low=8.0, close=9.5, volume=300),
        ]
        [bar] = agg.aggregate(candles, 3)
        assert bar == Candle(
            timestamp=0, open=10.0, high=15.0, low=8.0, close=9.5, volume=600,
        )

    def test_short_final_bucket_kept(self, agg: CandleAggregator) -> None:
        candles = make_candles([100.0 + i for i in range(7)], step_ms=HOUR_MS)
        result = agg.aggregate(candles, 3)
        assert len(result) == 3
        assert result[-1].timestamp == candles[6].timestamp
        assert result[-1].close == candles[6].close
        assert result[-1].volume == candles[6].volume

    def test_timestamps_ascending(self, agg: CandleAggregator) -> None:
        candles = make_candles([float(i) + 50 for i in range(12)], step_ms=HOUR_MS)
        result = agg.aggregate(candles, 4)
        assert [c.timestamp for c in result] == [
            candles[0].timestamp,
            candles[4].timestamp,
            candles[8].timestamp,
        ]


# --- Properties ---


class TestAggregationProperties:
    """Invariants that hold for every valid candle sequence."""

    @given(candles=candle_lists(), factor=st.integers(1, 10))
    @settings(max_examples=200)
    def test_containment_preserved(self, candles: list[Candle], factor: int) -> None:
        for bar in CandleAggregator().aggregate(candles, factor):
            assert bar.is_valid

    @given(candles=candle_lists(), factor=st.integers(1, 10))
    @settings(max_examples=200)
    def test_volume_conserved(self, candles: list[Candle], factor: int) -> None:
        result = CandleAggregator().aggregate(candles, factor)
        assert sum(c.volume for c in result) == sum(c.volume for c in candles)

    @given(candles=candle_lists(), factor=st.integers(1, 10))
    @settings(max_examples=200)
    def test_bucket_count(self, candles: list[Candle], factor: int) -> None:
        result = CandleAggregator().aggregate(candles, factor)
        assert len(result) == -(-len(candles) // factor)

    @given(blocks=st.integers(0, 8), data=st.data())
    @settings(max_examples=200)
    def test_composable_two_then_three_equals_six(
        self,
        blocks: int,
        data: st.DataObject,
    ) -> None:
        candles = data.draw(candle_lists(min_size=blocks * 6, max_size=blocks * 6))
        agg = CandleAggregator()
        assert agg.aggregate(agg.aggregate(candles, 2), 3) == agg.aggregate(candles, 6)
