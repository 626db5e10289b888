"""Reference quote directory.

Read-only, process-wide data loaded once at import: the reference prices
that seed synthetic quotes and series, and the popular-symbol groups shown
by the CLI. Nothing here is mutated at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from chartfeed.market.types import SymbolQuote

# Suffixes some providers drop ("RELIANCE.NS" -> "RELIANCE", "BTC-USD" -> "BTC")
_ROOT_SUFFIXES = (".NS", ".BO", "-USD")


def _quote(
    symbol: str,
    name: str,
    price: float,
    change: float,
    change_percent: float,
) -> tuple[str, SymbolQuote]:
    return symbol, SymbolQuote(symbol, name, price, change, change_percent)


REFERENCE_QUOTES: Mapping[str, SymbolQuote] = MappingProxyType(
    dict(
        [
            _quote("AAPL", "Apple Inc.", 178.25, 2.15, 1.22),
            _quote("GOOGL", "Alphabet Inc.", 142.87, -1.23, -0.85),
            _quote("MSFT", "Microsoft Corp.", 378.90, 5.67, 1.52),
            _quote("TSLA", "Tesla Inc.", 248.42, -8.90, -3.46),
            _quote("AMZN", "Amazon.com Inc.", 155.73, 3.22, 2.11),
            _quote("NVDA", "NVIDIA Corp.", 875.28, 12.45, 1.44),
            _quote("META", "Meta Platforms Inc.", 485.67, -2.89, -0.59),
            _quote("BTC-USD", "Bitcoin USD", 67250.00, 1250.75, 1.89),
            _quote("ETH-USD", "Ethereum USD", 3425.80, -45.20, -1.30),
            _quote("SPY", "SPDR S&P 500 ETF", 542.18, 2.87, 0.53),
            _quote("QQQ", "Invesco QQQ Trust", 425.67, 3.45, 0.82),
            _quote("RELIANCE.NS", "Reliance Industries Ltd.", 2456.75, 23.45, 0.96),
            _quote("TCS.NS", "Tata Consultancy Services Ltd.", 3441.10, -12.30, -0.36),
            _quote("HDFCBANK.NS", "HDFC Bank Ltd.", 1515.40, 8.75, 0.58),
            _quote("INFY.NS", "Infosys Ltd.", 1789.25, -5.60, -0.31),
        ],
    ),
)

POPULAR_SYMBOLS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "US": (
            "AAPL", "GOOGL", "MSFT", "TSLA", "AMZN", "NVDA",
            "META", "SPY", "QQQ", "MSTR", "PLTR", "QUBT",
        ),
        "INDIAN": (
            "RELIANCE.NS", "TCS.NS", "HDFCBANK.NS", "INFY.NS", "HINDUNILVR.NS",
            "ITC.NS", "SBIN.NS", "BHARTIARTL.NS", "KOTAKBANK.NS", "LT.NS",
        ),
        "CRYPTO": ("BTC", "ETH", "ADA", "SOL", "DOT", "LINK", "MATIC", "AVAX"),
        "COMMODITIES": ("GLD", "SLV", "USO", "UNG", "CORN", "WEAT", "SOYB", "DBA"),
        "INDICES": ("SPY", "QQQ", "DIA", "IWM", "VTI", "VEA", "VWO", "EFA"),
        "CURRENCIES": ("UUP", "FXE", "FXY", "FXB", "FXC", "FXA", "FXF", "CYB"),
    },
)


def root_symbol(symbol: str) -> str:
    """Uppercase ticker without exchange or currency suffix."""
    clean = symbol.strip().upper()
    for suffix in _ROOT_SUFFIXES:
        if clean.endswith(suffix):
            return clean.removesuffix(suffix)
    return clean


class ReferenceDirectory:
    """Immutable symbol -> reference quote lookup."""

    def __init__(self, quotes: Mapping[str, SymbolQuote] = REFERENCE_QUOTES) -> None:
        self._quotes: Mapping[str, SymbolQuote] = MappingProxyType(dict(quotes))
        self._by_root: Mapping[str, SymbolQuote] = MappingProxyType(
            {root_symbol(symbol): quote for symbol, quote in quotes.items()},
        )

    def __len__(self) -> int:
        return len(self._quotes)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and self.lookup(symbol) is not None

    def lookup(self, symbol: str) -> SymbolQuote | None:
        """Exact match first, then by root symbol ("BTC" finds "BTC-USD")."""
        clean = symbol.strip().upper()
        quote = self._quotes.get(clean)
        if quote is None:
            quote = self._by_root.get(root_symbol(clean))
        return quote

    def search(self, query: str, limit: int = 10) -> list[SymbolQuote]:
        """Case-insensitive substring match on symbol or name, prices zeroed."""
        needle = root_symbol(query).lower()
        if not needle:
            return []
        hits = [
            SymbolQuote.search_hit(quote.symbol, quote.name)
            for quote in self._quotes.values()
            if needle in quote.symbol.lower() or needle in quote.name.lower()
        ]
        return hits[:limit]


DEFAULT_DIRECTORY = ReferenceDirectory()
