"""Tests for the Finnhub mappers and provider."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from chartfeed.config import FinnhubConfig
from chartfeed.engine.timeframes import TimeframeResolver
from chartfeed.market.errors import (
    MalformedResponseError,
    NoDataAvailableError,
    SymbolNotFoundError,
)
from chartfeed.market.finnhub import FinnhubProvider
from chartfeed.market.finnhub.mappers import (
    finnhub_candles_to_candles,
    finnhub_profile_name,
    finnhub_quote_to_quote,
    finnhub_search_to_quotes,
)
from chartfeed.market.transport import HttpTransport

Build = Callable[[Callable[[httpx.Request], httpx.Response]], HttpTransport]

_QUOTE = {"c": 378.9, "d": 5.67, "dp": 1.52, "h": 380.0, "l": 370.0, "o": 372.0, "pc": 373.23}


def _candle_payload(count: int, status: str = "ok") -> dict[str, Any]:
    base = 1_770_681_600
    return {
        "s": status,
        "t": [base + i * 86_400 for i in range(count)],
        "o": [100.0 + i for i in range(count)],
        "h": [102.0 + i for i in range(count)],
        "l": [99.0 + i for i in range(count)],
        "c": [101.0 + i for i in range(count)],
        "v": [1000 + i for i in range(count)],
    }


def _router(routes: dict[str, Any], seen: list[httpx.Request]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        for suffix, body in routes.items():
            if request.url.path.endswith(suffix):
                if isinstance(body, int):
                    return httpx.Response(body)
                return httpx.Response(200, json=body)
        return httpx.Response(404)

    return handler


# --- Mappers ---


class TestQuoteMapper:
    """/quote conversion."""

    def test_uses_reported_percent(self) -> None:
        quote = finnhub_quote_to_quote(_QUOTE, symbol="MSFT", name="MSFT")
        assert quote.price == 378.9
        assert quote.change == 5.67
        assert quote.change_percent == 1.52

    def test_derives_percent_when_absent(self) -> None:
        quote = finnhub_quote_to_quote({"c": 110.0, "d": 10.0}, symbol="X", name="X")
        assert quote.change_percent == pytest.approx(10.0)

    def test_zero_price_is_not_found(self) -> None:
        payload = {"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0}
        with pytest.raises(SymbolNotFoundError):
            finnhub_quote_to_quote(payload, symbol="ZZZZ", name="ZZZZ")

    def test_missing_change_is_malformed(self) -> None:
        with pytest.raises(MalformedResponseError, match="d"):
            finnhub_quote_to_quote({"c": 10.0}, symbol="X", name="X")

    def test_error_body_is_malformed(self) -> None:
        with pytest.raises(MalformedResponseError, match="Invalid API key"):
            finnhub_quote_to_quote({"error": "Invalid API key"}, symbol="X", name="X")


class TestProfileName:
    """Best-effort company name."""

    def test_name(self) -> None:
        assert finnhub_profile_name({"name": "Microsoft Corp"}) == "Microsoft Corp"

    @pytest.mark.parametrize("payload", [{}, {"name": ""}, [], None])
    def test_absent(self, payload: Any) -> None:
        assert finnhub_profile_name(payload) is None


class TestCandleMapper:
    """/stock/candle conversion."""

    def test_parallel_arrays(self) -> None:
        candles = finnhub_candles_to_candles(_candle_payload(3))
        assert len(candles) == 3
        assert candles[0].timestamp == 1_770_681_600_000
        assert candles[0].open == 100.0
        assert candles[2].close == 103.0
        assert candles[2].volume == 1002

    def test_no_data_status(self) -> None:
        with pytest.raises(NoDataAvailableError):
            finnhub_candles_to_candles({"s": "no_data"})

    def test_other_status_malformed(self) -> None:
        with pytest.raises(MalformedResponseError, match="status"):
            finnhub_candles_to_candles(_candle_payload(3, status="error"))

    def test_ragged_arrays_malformed(self) -> None:
        payload = _candle_payload(3)
        payload["v"] = payload["v"][:2]
        with pytest.raises(MalformedResponseError, match="differ in length"):
            finnhub_candles_to_candles(payload)

    def test_missing_array_malformed(self) -> None:
        payload = _candle_payload(3)
        del payload["h"]
        with pytest.raises(MalformedResponseError, match="'h'"):
            finnhub_candles_to_candles(payload)

    def test_null_value_malformed(self) -> None:
        payload = _candle_payload(3)
        payload["c"][1] = None
        with pytest.raises(MalformedResponseError, match=r"c\[1\]"):
            finnhub_candles_to_candles(payload)


class TestSearchMapper:
    """/search conversion."""

    def test_filters_types(self) -> None:
        payload = {
            "count": 3,
            "result": [
                {"symbol": "AAPL", "description": "APPLE INC", "type": "Common Stock"},
                {"symbol": "AAPL.SW", "description": "APPLE INC", "type": "Crypto"},
                {"symbol": "QQQ", "description": "INVESCO QQQ", "type": "ETP"},
            ],
        }
        results = finnhub_search_to_quotes(payload, ["Common Stock", "ETP"], 10)
        assert [r.symbol for r in results] == ["AAPL", "QQQ"]

    def test_skips_non_object_entries(self) -> None:
        payload = {
            "result": [
                None,
                "AAPL",
                {"symbol": None, "type": "Common Stock"},
                {"symbol": "MSFT", "description": 12, "type": "Common Stock"},
            ],
        }
        results = finnhub_search_to_quotes(payload, ["Common Stock"], 10)
        assert [(r.symbol, r.name) for r in results] == [("MSFT", "MSFT")]

    def test_result_not_array(self) -> None:
        with pytest.raises(MalformedResponseError, match="result"):
            finnhub_search_to_quotes({"result": {"symbol": "AAPL"}}, ["Common Stock"], 10)


# --- Provider ---


class TestFinnhubProvider:
    """Requests built from config, responses parsed by the mappers."""

    def test_crypto_remap(self) -> None:
        provider = FinnhubProvider(FinnhubConfig(), HttpTransport())
        assert provider.format_symbol("btc") == "BINANCE:BTCUSDT"
        assert provider.format_symbol("ETH-USD") == "BINANCE:ETHUSDT"
        assert provider.format_symbol("aapl") == "AAPL"

    async def test_quote_with_company_name(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/quote": _QUOTE, "/stock/profile2": {"name": "Microsoft Corp"}}
        provider = FinnhubProvider(
            FinnhubConfig(api_key="tok"), mock_transport(_router(routes, seen))
        )
        quote = await provider.get_quote("msft")

        assert quote.symbol == "MSFT"
        assert quote.name == "Microsoft Corp"
        assert seen[0].url.params["token"] == "tok"
        assert seen[0].url.params["symbol"] == "MSFT"

    async def test_profile_failure_keeps_symbol(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/quote": _QUOTE, "/stock/profile2": 500}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        quote = await provider.get_quote("MSFT")
        assert quote.name == "MSFT"

    async def test_series_request_window(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/stock/candle": _candle_payload(10)}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        candles = await provider.get_series("AAPL", TimeframeResolver().resolve("1w"))

        params = seen[0].url.params
        assert params["resolution"] == "W"
        window = int(params["to"]) - int(params["from"])
        assert window == 730 * 86_400
        assert len(candles) == 10

    async def test_series_no_data(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/stock/candle": {"s": "no_data"}}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        with pytest.raises(NoDataAvailableError):
            await provider.get_series("AAPL", TimeframeResolver().resolve("1d"))

    async def test_series_empty_ok_is_no_data(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/stock/candle": _candle_payload(0)}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        with pytest.raises(NoDataAvailableError):
            await provider.get_series("AAPL", TimeframeResolver().resolve("1d"))

    async def test_hourly_resolution(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/stock/candle": _candle_payload(8)}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        await provider.get_series("BTC", TimeframeResolver().resolve("4h"))
        assert seen[0].url.params["resolution"] == "60"
        assert seen[0].url.params["symbol"] == "BINANCE:BTCUSDT"

    async def test_search(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {
            "/search": {
                "result": [{"symbol": "NVDA", "description": "NVIDIA CORP", "type": "Common Stock"}],
            },
        }
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        results = await provider.search_symbols("nvidia")
        assert seen[0].url.params["q"] == "nvidia"
        assert [r.symbol for r in results] == ["NVDA"]

    async def test_search_with_null_entries(self, mock_transport: Build) -> None:
        seen: list[httpx.Request] = []
        routes = {"/search": {"result": [None]}}
        provider = FinnhubProvider(FinnhubConfig(), mock_transport(_router(routes, seen)))
        assert await provider.search_symbols("apple") == []
