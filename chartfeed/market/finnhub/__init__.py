"""Finnhub provider implementation."""

from chartfeed.market.finnhub.data import FinnhubProvider

__all__ = [
    "FinnhubProvider",
]
