"""In-memory provider for testing."""

from chartfeed.market.fake.data import FakeMarketDataProvider

__all__ = [
    "FakeMarketDataProvider",
]
