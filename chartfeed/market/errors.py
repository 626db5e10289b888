"""Market data error hierarchy.

Every provider failure inherits from MarketDataError so the fallback
orchestrator can recover from all of them with a single except clause.
ConfigurationError and TransportNotConnectedError sit outside that hierarchy:
they are caller or setup bugs and must surface.
"""

from __future__ import annotations


class MarketDataError(Exception):
    """Base exception for all recoverable provider errors."""


class ProviderNetworkError(MarketDataError):
    """Connection failures, DNS errors, dropped sockets."""


class ProviderAPIError(ProviderNetworkError):
    """Unexpected HTTP status from a provider or relay.

    Stores the HTTP status code and the response text.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Provider API error {status_code}: {message}")


class ProviderTimeoutError(MarketDataError):
    """Request exceeded its per-call timeout."""


class RateLimitedError(MarketDataError):
    """HTTP 429 or a provider throttle notice in the response body."""


class SymbolNotFoundError(MarketDataError):
    """Provider does not know the symbol."""


class MalformedResponseError(MarketDataError):
    """Payload present but fields missing, invalid, or too short."""


class NoDataAvailableError(MarketDataError):
    """Well-formed response with an empty series."""


class ConfigurationError(Exception):
    """Unusable configuration. Raised at startup, never recovered."""


class TransportNotConnectedError(Exception):
    """HTTP transport used before connect(). A caller bug, never recovered."""
