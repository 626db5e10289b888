"""Finnhub payload to domain type converters.

Quotes use single-letter numeric fields (c, d, dp). Candles arrive as
parallel arrays plus a status flag that must be "ok". Timestamps are epoch
seconds.
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

STATUS_OK = "ok"
STATUS_NO_DATA = "no_data"

# Parallel arrays: time, open, high, low, close, volume
_CANDLE_ARRAYS = ("t", "o", "h", "l", "c", "v")


def _as_object(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedResponseError(f"Finnhub {what} response is not an object")
    if "error" in payload:
        raise MalformedResponseError(f"Finnhub {what} error: {payload['error']}")
    return payload


def finnhub_quote_to_quote(payload: Any, symbol: str, name: str) -> SymbolQuote:
    """Convert a /quote response to a SymbolQuote.

    Finnhub answers unknown symbols with an all-zero quote.
    """
    body = _as_object(payload, "quote")
    price = to_float(body.get("c"), "c")
    if price == 0:
        raise SymbolNotFoundError(f"No Finnhub quote for {symbol}")
    change = to_float(body.get("d"), "d")
    percent = body.get("dp")
    return SymbolQuote(
        symbol=symbol,
        name=name,
        price=price,
        change=change,
        change_percent=(
            to_float(percent, "dp") if percent is not None
            else change_percent(price, change)
        ),
    )


def finnhub_profile_name(payload: Any) -> str | None:
    """Company name from a /stock/profile2 response, if present."""
    if isinstance(payload, dict):
        name = payload.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def finnhub_candles_to_candles(payload: Any) -> list[Candle]:
    """Convert a /stock/candle response to ascending candles.

    Raises:
        NoDataAvailableError: status "no_data".
        MalformedResponseError: other status, missing or ragged arrays.
    """
    body = _as_object(payload, "candle")
    status = body.get("s")
    if status == STATUS_NO_DATA:
        raise NoDataAvailableError("Finnhub returned no_data")
    if status != STATUS_OK:
        raise MalformedResponseError(f"Unexpected Finnhub candle status: {status!r}")

    arrays: dict[str, list[Any]] = {}
    for key in _CANDLE_ARRAYS:
        values = body.get(key)
        if not isinstance(values, list):
            raise MalformedResponseError(f"Missing Finnhub candle array {key!r}")
        arrays[key] = values

    lengths = {len(values) for values in arrays.values()}
    if len(lengths) != 1:
        raise MalformedResponseError(f"Finnhub candle arrays differ in length: {lengths}")

    candles = [
        Candle(
            timestamp=int(to_float(arrays["t"][i], f"t[{i}]")) * 1000,
            open=to_float(arrays["o"][i], f"o[{i}]"),
            high=to_float(arrays["h"][i], f"h[{i}]"),
            low=to_float(arrays["l"][i], f"l[{i}]"),
            close=to_float(arrays["c"][i], f"c[{i}]"),
            volume=to_volume(arrays["v"][i], f"v[{i}]"),
        )
        for i in range(len(arrays["t"]))
    ]
    return normalize_candles(candles)


def finnhub_search_to_quotes(
    payload: Any,
    allowed_types: list[str],
    limit: int,
) -> list[SymbolQuote]:
    """Convert /search results, keeping stocks and ETPs.

    Entries that are not objects or lack a symbol are skipped.
    """
    body = _as_object(payload, "search")
    results: list[SymbolQuote] = []
    for item in records(body.get("result"), "result"):
        if item.get("type") not in allowed_types:
            continue
        symbol = first_text(item, "symbol")
        if symbol is None:
            continue
        results.append(SymbolQuote.search_hit(symbol, first_text(item, "description") or symbol))
        if len(results) >= limit:
            break
    return results
