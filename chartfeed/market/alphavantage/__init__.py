"""Alpha Vantage provider implementation."""

from chartfeed.market.alphavantage.data import AlphaVantageProvider

__all__ = [
    "AlphaVantageProvider",
]
