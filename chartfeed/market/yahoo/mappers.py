"""Yahoo chart API payload to domain type converters.

Both quotes and candles come from the chart endpoint: a ``chart.result[0]``
envelope with a ``meta`` block (current and previous price) and an
``indicators.quote[0]`` block of parallel OHLCV arrays aligned with
``timestamp[]`` (epoch seconds). Null closes mark bars with no trading.
"""

from __future__ import annotations

from typing import Any

from chartfeed.market.errors import (
    MalformedResponseError,
    NoDataAvailableError,
    SymbolNotFoundError,
)
from chartfeed.market.types import Candle, SymbolQuote, change_percent
from chartfeed.market.utils import (
    first_text,
    normalize_candles,
    records,
    to_float,
    to_volume,
)

_NOT_FOUND_CODE = "Not Found"


def chart_result(payload: Any) -> dict[str, Any]:
    """Unwrap ``chart.result[0]``.

    Raises:
        SymbolNotFoundError: ``chart.error`` reports an unknown symbol.
        MalformedResponseError: Envelope missing or empty.
    """
    chart = payload.get("chart") if isinstance(payload, dict) else None
    if not isinstance(chart, dict):
        raise MalformedResponseError("Missing 'chart' in Yahoo response")

    error = chart.get("error")
    if error:
        if isinstance(error, dict) and error.get("code") == _NOT_FOUND_CODE:
            raise SymbolNotFoundError(str(error.get("description") or _NOT_FOUND_CODE))
        raise MalformedResponseError(f"Yahoo chart error: {error}")

    results = chart.get("result")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise MalformedResponseError("Missing 'chart.result[0]' in Yahoo response")
    return results[0]


def yahoo_quote_to_quote(payload: Any, symbol: str) -> SymbolQuote:
    """Build a quote from the chart ``meta`` block; change is derived."""
    meta = chart_result(payload).get("meta")
    if not isinstance(meta, dict):
        raise MalformedResponseError("Missing 'meta' in Yahoo chart result")

    price = to_float(meta.get("regularMarketPrice"), "regularMarketPrice")
    previous_raw = meta.get("previousClose", meta.get("chartPreviousClose"))
    previous = to_float(previous_raw, "previousClose")
    if price <= 0 or previous <= 0:
        raise MalformedResponseError(
            f"Non-positive Yahoo price for {symbol}: {price} / {previous}",
        )

    change = price - previous
    return SymbolQuote(
        symbol=symbol,
        name=first_text(meta, "longName", "shortName") or symbol,
        price=price,
        change=change,
        change_percent=change_percent(price, change),
    )


def yahoo_chart_to_candles(payload: Any) -> list[Candle]:
    """Convert chart arrays to ascending candles.

    Rows whose close is null are skipped. A row with a close but a missing
    open, high, low or volume is malformed.
    """
    result = chart_result(payload)
    timestamps = result.get("timestamp")
    if timestamps is None:
        raise NoDataAvailableError("Yahoo chart result has no timestamps")
    if not isinstance(timestamps, list):
        raise MalformedResponseError("Yahoo 'timestamp' is not an array")

    indicators = result.get("indicators")
    blocks = indicators.get("quote") if isinstance(indicators, dict) else None
    if not isinstance(blocks, list) or not blocks or not isinstance(blocks[0], dict):
        raise MalformedResponseError("Missing 'indicators.quote[0]' in Yahoo chart")
    quote = blocks[0]

    columns: dict[str, list[Any]] = {}
    for key in ("open", "high", "low", "close", "volume"):
        values = quote.get(key)
        if not isinstance(values, list) or len(values) != len(timestamps):
            raise MalformedResponseError(f"Yahoo '{key}' array missing or misaligned")
        columns[key] = values

    candles: list[Candle] = []
    for i, ts in enumerate(timestamps):
        if columns["close"][i] is None:
            continue
        candles.append(
            Candle(
                timestamp=int(to_float(ts, f"timestamp[{i}]")) * 1000,
                open=to_float(columns["open"][i], f"open[{i}]"),
                high=to_float(columns["high"][i], f"high[{i}]"),
                low=to_float(columns["low"][i], f"low[{i}]"),
                close=to_float(columns["close"][i], f"close[{i}]"),
                volume=to_volume(columns["volume"][i], f"volume[{i}]"),
            ),
        )
    return normalize_candles(candles)


def yahoo_search_to_quotes(
    payload: Any,
    allowed_types: list[str],
    limit: int,
) -> list[SymbolQuote]:
    """Convert search ``quotes[]``, keeping equities, ETFs and indices.

    Entries that are not objects or lack a symbol are skipped.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Yahoo search response is not an object")
    results: list[SymbolQuote] = []
    for item in records(payload.get("quotes"), "quotes"):
        if item.get("typeDisp") not in allowed_types:
            continue
        symbol = first_text(item, "symbol")
        if symbol is None:
            continue
        name = first_text(item, "longname", "shortname") or symbol
        results.append(SymbolQuote.search_hit(symbol, name))
        if len(results) >= limit:
            break
    return results
