"""Alpha Vantage payload to domain type converters.

Alpha Vantage sends every number as a string under verbose numbered keys
("05. price", "4. close"). Time series are objects keyed by local date
strings. Throttling and unknown symbols come back as HTTP 200 with a
"Note"/"Information" or "Error Message" body.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from chartfeed.market.errors import (
    MalformedResponseError,
    RateLimitedError,
    SymbolNotFoundError,
)
from chartfeed.market.types import Candle, SymbolQuote
from chartfeed.market.utils import (
    first_text,
    normalize_candles,
    records,
    to_float,
    to_percent,
    to_volume,
)
from chartfeed.utils.time import to_epoch_ms

# Series function -> key holding the time series in the response
SERIES_KEYS: dict[str, str] = {
    "TIME_SERIES_INTRADAY": "Time Series (60min)",
    "TIME_SERIES_DAILY": "Time Series (Daily)",
    "TIME_SERIES_WEEKLY": "Weekly Time Series",
    "TIME_SERIES_MONTHLY": "Monthly Time Series",
}


def check_payload(payload: Any) -> dict[str, Any]:
    """Validate the envelope and surface soft errors.

    Raises:
        RateLimitedError: "Note" or "Information" throttle notice.
        SymbolNotFoundError: "Error Message" body.
        MalformedResponseError: Body is not a JSON object.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Alpha Vantage response is not an object")
    if "Error Message" in payload:
        raise SymbolNotFoundError(str(payload["Error Message"]))
    for key in ("Note", "Information"):
        if key in payload:
            raise RateLimitedError(str(payload[key]))
    return payload


def av_quote_to_quote(payload: Any, symbol: str, name: str) -> SymbolQuote:
    """Convert a GLOBAL_QUOTE response to a SymbolQuote."""
    quote = check_payload(payload).get("Global Quote")
    if not quote:
        raise SymbolNotFoundError(f"No Alpha Vantage quote for {symbol}")
    if not isinstance(quote, dict):
        raise MalformedResponseError("'Global Quote' is not an object")
    return SymbolQuote(
        symbol=symbol,
        name=name,
        price=to_float(quote.get("05. price"), "05. price"),
        change=to_float(quote.get("09. change"), "09. change"),
        change_percent=to_percent(
            quote.get("10. change percent"),
            "10. change percent",
        ),
    )


def _series_timezone(meta: Any, default: str) -> ZoneInfo:
    """Time zone named in 'Meta Data' (its key number varies by function)."""
    name = default
    if isinstance(meta, dict):
        for key, value in meta.items():
            if key.endswith("Time Zone") and isinstance(value, str):
                name = value
                break
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(default)


def av_series_to_candles(
    payload: Any,
    function: str,
    default_timezone: str,
) -> list[Candle]:
    """Convert a TIME_SERIES_* response to ascending candles.

    A response without the expected series key is malformed; an empty
    series object yields an empty list.
    """
    body = check_payload(payload)
    key = SERIES_KEYS[function]
    series = body.get(key)
    if not isinstance(series, dict):
        raise MalformedResponseError(f"Missing {key!r} in Alpha Vantage response")

    tz = _series_timezone(body.get("Meta Data"), default_timezone)
    candles: list[Candle] = []
    for stamp, row in series.items():
        if not isinstance(row, dict):
            raise MalformedResponseError(f"Series row {stamp!r} is not an object")
        try:
            local = datetime.fromisoformat(stamp)
        except ValueError as e:
            raise MalformedResponseError(f"Invalid series timestamp {stamp!r}") from e
        candles.append(
            Candle(
                timestamp=to_epoch_ms(local.replace(tzinfo=tz)),
                open=to_float(row.get("1. open"), "1. open"),
                high=to_float(row.get("2. high"), "2. high"),
                low=to_float(row.get("3. low"), "3. low"),
                close=to_float(row.get("4. close"), "4. close"),
                volume=to_volume(row.get("5. volume"), "5. volume"),
            ),
        )
    return normalize_candles(candles)


def av_search_to_quotes(
    payload: Any,
    min_match_score: float,
    limit: int,
) -> list[SymbolQuote]:
    """Convert SYMBOL_SEARCH bestMatches, keeping confident matches only.

    Entries that are not objects or lack a symbol are skipped.
    """
    matches = records(check_payload(payload).get("bestMatches"), "bestMatches")
    results: list[SymbolQuote] = []
    for match in matches:
        score = to_float(match.get("9. matchScore"), "9. matchScore")
        if score <= min_match_score:
            continue
        symbol = first_text(match, "1. symbol")
        if symbol is None:
            continue
        results.append(SymbolQuote.search_hit(symbol, first_text(match, "2. name") or symbol))
        if len(results) >= limit:
            break
    return results
