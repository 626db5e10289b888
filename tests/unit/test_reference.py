"""Tests for the reference quote directory."""

from __future__ import annotations

import pytest

from chartfeed.feed.reference import (
    DEFAULT_DIRECTORY,
    POPULAR_SYMBOLS,
    REFERENCE_QUOTES,
    ReferenceDirectory,
    root_symbol,
)
from tests.factories import make_quote


class TestReferenceData:
    """Static, read-only tables."""

    def test_fifteen_reference_quotes(self) -> None:
        assert len(REFERENCE_QUOTES) == 15
        assert REFERENCE_QUOTES["AAPL"].price == 178.25
        assert REFERENCE_QUOTES["BTC-USD"].name == "Bitcoin USD"

    def test_quotes_read_only(self) -> None:
        with pytest.raises(TypeError):
            REFERENCE_QUOTES["XYZ"] = make_quote(symbol="XYZ")  # type: ignore[index]

    def test_popular_groups(self) -> None:
        assert set(POPULAR_SYMBOLS) == {
            "US", "INDIAN", "CRYPTO", "COMMODITIES", "INDICES", "CURRENCIES",
        }
        assert "RELIANCE.NS" in POPULAR_SYMBOLS["INDIAN"]


class TestRootSymbol:
    """Exchange and currency suffixes are dropped."""

    @pytest.mark.parametrize(
        ("symbol", "root"),
        [("RELIANCE.NS", "RELIANCE"), ("tcs.bo", "TCS"), ("BTC-USD", "BTC"), (" aapl ", "AAPL")],
    )
    def test_root(self, symbol: str, root: str) -> None:
        assert root_symbol(symbol) == root


class TestLookup:
    """Exact match, then by root."""

    def test_exact(self) -> None:
        assert DEFAULT_DIRECTORY.lookup("MSFT") is REFERENCE_QUOTES["MSFT"]

    def test_case_insensitive(self) -> None:
        assert DEFAULT_DIRECTORY.lookup("msft") is REFERENCE_QUOTES["MSFT"]

    def test_by_root(self) -> None:
        assert DEFAULT_DIRECTORY.lookup("BTC") is REFERENCE_QUOTES["BTC-USD"]
        assert DEFAULT_DIRECTORY.lookup("INFY") is REFERENCE_QUOTES["INFY.NS"]

    def test_unknown(self) -> None:
        assert DEFAULT_DIRECTORY.lookup("ZZZZ") is None
        assert "ZZZZ" not in DEFAULT_DIRECTORY
        assert "AAPL" in DEFAULT_DIRECTORY

    def test_custom_directory(self) -> None:
        directory = ReferenceDirectory({"XYZ": make_quote(symbol="XYZ")})
        assert len(directory) == 1
        assert directory.lookup("XYZ") is not None


class TestSearch:
    """Substring match on symbol or name."""

    def test_by_symbol(self) -> None:
        results = DEFAULT_DIRECTORY.search("nvd")
        assert [r.symbol for r in results] == ["NVDA"]
        assert results[0].price == 0.0

    def test_by_name(self) -> None:
        assert [r.symbol for r in DEFAULT_DIRECTORY.search("tesla")] == ["TSLA"]

    def test_suffix_ignored(self) -> None:
        assert "TCS.NS" in [r.symbol for r in DEFAULT_DIRECTORY.search("TCS.NS")]

    def test_limit(self) -> None:
        assert len(DEFAULT_DIRECTORY.search("s", limit=3)) == 3

    def test_no_match(self) -> None:
        assert DEFAULT_DIRECTORY.search("qwertyuiop") == []

    def test_blank_query(self) -> None:
        assert DEFAULT_DIRECTORY.search("   ") == []
