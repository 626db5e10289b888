"""Yahoo chart API provider implementation."""

from chartfeed.market.yahoo.data import YahooProvider

__all__ = [
    "YahooProvider",
]
