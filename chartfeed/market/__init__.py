"""Market data abstraction layer.

Re-exports all public types, the provider protocol, transport and errors
for convenient imports:
    from chartfeed.market import Candle, MarketDataProvider, MarketDataError
"""

from chartfeed.market.errors import (
    ConfigurationError,
    MalformedResponseError,
    MarketDataError,
    NoDataAvailableError,
    ProviderAPIError,
    ProviderNetworkError,
    ProviderTimeoutError,
    RateLimitedError,
    SymbolNotFoundError,
    TransportNotConnectedError,
)
from chartfeed.market.provider import MarketDataProvider
from chartfeed.market.transport import DIRECT, HttpTransport, Relay
from chartfeed.market.types import (
    Candle,
    ChartSeries,
    IndicatorPoint,
    SymbolQuote,
)

__all__ = [
    "DIRECT",
    "Candle",
    "ChartSeries",
    "ConfigurationError",
    "HttpTransport",
    "IndicatorPoint",
    "MalformedResponseError",
    "MarketDataError",
    "MarketDataProvider",
    "NoDataAvailableError",
    "ProviderAPIError",
    "ProviderNetworkError",
    "ProviderTimeoutError",
    "RateLimitedError",
    "Relay",
    "SymbolNotFoundError",
    "SymbolQuote",
    "TransportNotConnectedError",
]
