"""chartfeed: market-data normalization and RSI chart pipeline."""

__version__ = "0.1.0"
