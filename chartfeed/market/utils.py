"""Shared provider helpers.

Centralized parsing used by every provider mapper. Providers send numbers
as JSON numbers, numeric strings, or nulls; anything that is not a finite
number is a malformed response, never a silent zero.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

from chartfeed.market.errors import MalformedResponseError, NoDataAvailableError
from chartfeed.market.types import Candle


def to_float(value: Any, field: str) -> float:
    """Convert a provider number or numeric string to float.

    Raises:
        MalformedResponseError: If the value is missing, non-numeric or
            not finite.
    """
    if value is None or isinstance(value, bool):
        raise MalformedResponseError(f"Missing numeric field: {field}")
    try:
        result = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(
            f"Invalid numeric field {field}: {value!r}",
        ) from e
    if not math.isfinite(result):
        raise MalformedResponseError(f"Non-finite numeric field {field}: {value!r}")
    return result


def to_volume(value: Any, field: str) -> int:
    """Convert a provider volume to a non-negative int."""
    volume = to_float(value, field)
    if volume < 0:
        raise MalformedResponseError(f"Negative volume in {field}: {value!r}")
    return int(volume)


def to_percent(value: Any, field: str) -> float:
    """Parse a percent field, stripping a trailing '%' if present."""
    if isinstance(value, str):
        value = value.strip().removesuffix("%")
    return to_float(value, field)


def records(value: Any, field: str) -> list[dict[str, Any]]:
    """Object entries of a payload array; non-object entries are dropped.

    Raises:
        MalformedResponseError: Value present but not an array.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"Expected an array for {field}, got {type(value).__name__}")
    return [item for item in value if isinstance(item, dict)]


def first_text(item: dict[str, Any], *keys: str) -> str | None:
    """First non-empty string among ``keys``."""
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def normalize_candles(candles: Iterable[Candle]) -> list[Candle]:
    """Sort ascending by timestamp and drop duplicates, keeping the last."""
    by_timestamp: dict[int, Candle] = {}
    for candle in candles:
        by_timestamp[candle.timestamp] = candle
    return [by_timestamp[ts] for ts in sorted(by_timestamp)]


def require_candles(candles: list[Candle], min_count: int, source: str) -> list[Candle]:
    """Reject empty series and series shorter than one output bucket.

    Raises:
        NoDataAvailableError: No candles at all.
        MalformedResponseError: Fewer than ``min_count`` candles.
    """
    if not candles:
        raise NoDataAvailableError(f"No candles returned by {source}")
    if len(candles) < min_count:
        raise MalformedResponseError(
            f"{source} returned {len(candles)} candles, need at least {min_count}",
        )
    return candles
