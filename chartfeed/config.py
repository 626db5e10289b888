"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., CHARTFEED_FINNHUB__API_KEY=your-key)

Every behavior-altering constant used by a provider adapter lives here.
An invalid value fails at startup with a pydantic ValidationError.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_PROVIDERS = frozenset({"alphavantage", "finnhub", "yahoo"})
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})

# Natively supported base units and their interval length in milliseconds.
# A month is a fixed 30 days.
BASE_UNIT_MS: dict[str, int] = {
    "1h": 3_600_000,
    "1d": 86_400_000,
    "1w": 604_800_000,
    "1M": 2_592_000_000,
}


class TimeoutConfig(BaseModel):
    """Per-attempt timeouts in seconds."""

    quote: float = Field(default=10.0, gt=0, le=120)
    series: float = Field(default=15.0, gt=0, le=120)
    search: float = Field(default=8.0, gt=0, le=120)


class AlphaVantageConfig(BaseModel):
    """Alpha Vantage (query-string function API) settings."""

    base_url: str = "https://www.alphavantage.co/query"
    api_key: str = "demo"
    timeouts: TimeoutConfig = TimeoutConfig()
    strip_suffixes: list[str] = Field(default=[".NS", ".BO", "-USD"])
    compact_limit: int = Field(default=100, ge=1)
    default_timezone: str = "America/New_York"
    min_match_score: float = Field(default=0.5, ge=0.0, le=1.0)
    search_limit: int = Field(default=10, ge=1, le=50)


class FinnhubConfig(BaseModel):
    """Finnhub REST settings."""

    base_url: str = "https://finnhub.io/api/v1"
    api_key: str = ""
    timeouts: TimeoutConfig = TimeoutConfig()
    profile_timeout: float = Field(default=5.0, gt=0, le=60)
    crypto_symbols: dict[str, str] = Field(
        default={
            "BTC": "BINANCE:BTCUSDT",
            "ETH": "BINANCE:ETHUSDT",
            "ADA": "BINANCE:ADAUSDT",
            "SOL": "BINANCE:SOLUSDT",
            "DOT": "BINANCE:DOTUSDT",
            "LINK": "BINANCE:LINKUSDT",
            "MATIC": "BINANCE:MATICUSDT",
            "AVAX": "BINANCE:AVAXUSDT",
            "BTC-USD": "BINANCE:BTCUSDT",
            "ETH-USD": "BINANCE:ETHUSDT",
        },
    )
    search_types: list[str] = Field(default=["Common Stock", "ETP"])
    search_limit: int = Field(default=10, ge=1, le=50)


class YahooConfig(BaseModel):
    """Yahoo chart API settings.

    The chart API is reached through relays: each entry is a URL prefix to
    which the percent-encoded target URL is appended. An empty string means
    a direct request.
    """

    chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    search_url: str = "https://query2.finance.yahoo.com/v1/finance/search"
    relays: list[str] = Field(
        default=[
            "https://api.allorigins.win/raw?url=",
            "https://corsproxy.io/?",
            "https://cors-anywhere.herokuapp.com/",
            "https://api.codetabs.com/v1/proxy?quest=",
        ],
    )
    timeouts: TimeoutConfig = TimeoutConfig()
    quote_interval: str = "1d"
    quote_range: str = "5d"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )
    search_types: list[str] = Field(default=["Equity", "ETF", "Index"])
    search_limit: int = Field(default=10, ge=1, le=50)

    @field_validator("relays")
    @classmethod
    def validate_relays(cls, v: list[str]) -> list[str]:
        if len(v) == 0:
            raise ValueError("relays must not be empty (use [\"\"] for direct)")
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate relay in {v}")
        return v


class IndicatorConfig(BaseModel):
    """RSI, RSI moving average and Bollinger Band parameters."""

    rsi_period: int = Field(default=14, ge=2, le=100)
    ma_period: int = Field(default=14, ge=1, le=100)
    bb_period: int = Field(default=20, ge=2, le=100)
    bb_multiplier: float = Field(default=2.0, gt=0.0, le=5.0)


class TimeframeConfig(BaseModel):
    """Timeframe whitelist, fallback table and lookback hints.

    ``compounds`` lists labels derived by aggregation from the base unit
    sharing their suffix. ``coarser_fallback`` maps the unit suffix of a
    label outside the whitelist to the base it resolves to (factor 1).
    Labels with an unknown suffix resolve to ``unrecognized_fallback``.
    """

    compounds: list[str] = Field(
        default=["2h", "3h", "4h", "2d", "3d", "4d", "2w", "3w", "2M", "3M"],
    )
    coarser_fallback: dict[str, str] = Field(
        default={"h": "1d", "d": "1w", "w": "1M", "M": "1M"},
    )
    unrecognized_fallback: str = "1d"
    lookback_days: dict[str, int] = Field(
        default={"1h": 30, "1d": 365, "1w": 730, "1M": 1825},
    )
    max_lookback_days: int = Field(default=3650, ge=1)

    @model_validator(mode="after")
    def validate_tables(self) -> TimeframeConfig:
        """Every table entry must point at a native base unit."""
        suffixes = {base[-1] for base in BASE_UNIT_MS}
        for label in self.compounds:
            count, suffix = label[:-1], label[-1:]
            if not count.isdigit() or int(count) < 2 or suffix not in suffixes:
                raise ValueError(f"Invalid compound timeframe: {label!r}")
        for suffix, base in self.coarser_fallback.items():
            if base not in BASE_UNIT_MS:
                raise ValueError(
                    f"coarser_fallback[{suffix!r}] must be one of "
                    f"{sorted(BASE_UNIT_MS)}, got {base!r}"
                )
        if self.unrecognized_fallback not in BASE_UNIT_MS:
            raise ValueError(
                f"unrecognized_fallback must be one of {sorted(BASE_UNIT_MS)}, "
                f"got {self.unrecognized_fallback!r}"
            )
        missing = set(BASE_UNIT_MS) - set(self.lookback_days)
        if missing:
            raise ValueError(f"lookback_days missing base units: {sorted(missing)}")
        for base, days in self.lookback_days.items():
            if days < 1:
                raise ValueError(f"lookback_days[{base!r}] must be >= 1, got {days}")
        return self


class SyntheticConfig(BaseModel):
    """Synthetic (mock) data generation parameters."""

    periods: int = Field(default=200, ge=1, le=5000)
    default_base_price: float = Field(default=100.0, gt=0)
    start_ratio: float = Field(default=0.95, gt=0)
    volatility: float = Field(default=0.015, ge=0, le=0.5)
    wick_spread: float = Field(default=0.008, ge=0, le=0.5)
    min_price: float = Field(default=0.01, gt=0)
    volume_min: int = Field(default=100_000, ge=0)
    volume_max: int = Field(default=1_100_000, ge=1)
    quote_variation: float = Field(default=0.02, ge=0, le=0.5)
    quotes_enabled: bool = True

    @model_validator(mode="after")
    def validate_volume_range(self) -> SyntheticConfig:
        if self.volume_max <= self.volume_min:
            raise ValueError("volume_max must be greater than volume_min")
        return self


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        CHARTFEED_LOG_LEVEL=DEBUG
        CHARTFEED_PROVIDERS='["finnhub","yahoo"]'
        CHARTFEED_FINNHUB__API_KEY=your-key
        CHARTFEED_YAHOO__RELAYS='[""]'
        CHARTFEED_INDICATORS__BB_PERIOD=30
    """

    model_config = SettingsConfigDict(
        env_prefix="CHARTFEED_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    providers: list[str] = Field(default=["yahoo", "finnhub", "alphavantage"])
    alphavantage: AlphaVantageConfig = AlphaVantageConfig()
    finnhub: FinnhubConfig = FinnhubConfig()
    yahoo: YahooConfig = YahooConfig()
    indicators: IndicatorConfig = IndicatorConfig()
    timeframes: TimeframeConfig = TimeframeConfig()
    synthetic: SyntheticConfig = SyntheticConfig()
    max_candles: int = Field(default=500, ge=1, le=10_000)
    search_limit: int = Field(default=10, ge=1, le=50)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, v: list[str]) -> list[str]:
        if len(v) == 0:
            raise ValueError("providers must not be empty")
        v = [name.lower() for name in v]
        for name in v:
            if name not in VALID_PROVIDERS:
                raise ValueError(
                    f"Unknown provider: {name!r}. "
                    f"Available: {', '.join(sorted(VALID_PROVIDERS))}"
                )
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate provider in {v}")
        return v
