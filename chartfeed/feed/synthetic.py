"""Synthetic market data, the last step of the fallback chain.

MockDataGenerator produces a random-walk candle series or a perturbed quote
for any symbol. It has no failure path: every input yields a valid result.
"""

from __future__ import annotations

import random

from chartfeed.config import SyntheticConfig
from chartfeed.engine.indicators import IndicatorEngine
from chartfeed.engine.timeframes import Resolution
from chartfeed.market.types import Candle, ChartSeries, SymbolQuote, change_percent
from chartfeed.utils.time import now_ms


class MockDataGenerator:
    """Random-walk candles and perturbed quotes.

    Pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(
        self,
        config: SyntheticConfig | None = None,
        engine: IndicatorEngine | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config if config is not None else SyntheticConfig()
        self._engine = engine if engine is not None else IndicatorEngine()
        self._rng = rng if rng is not None else random.Random()

    @property
    def periods(self) -> int:
        return self._config.periods

    def generate(
        self,
        symbol: str,
        resolution: Resolution,
        reference_price: float | None = None,
    ) -> ChartSeries:
        """A full chart series of ``periods`` candles ending now."""
        candles = self.generate_candles(resolution, reference_price)
        return self._engine.build_series(candles)

    def generate_candles(
        self,
        resolution: Resolution,
        reference_price: float | None = None,
    ) -> list[Candle]:
        """Candles spaced one output interval apart, the last one interval ago.

        Each close moves the price by up to +/- volatility/2 of itself; wicks
        extend beyond the body by up to ``wick_spread``.
        """
        cfg = self._config
        rng = self._rng
        base = reference_price if reference_price else cfg.default_base_price
        interval = resolution.interval_ms
        end = now_ms()

        price = base * cfg.start_ratio
        candles: list[Candle] = []
        for i in range(cfg.periods):
            open_ = price
            move = (rng.random() - 0.5) * cfg.volatility * price
            close = max(price + move, cfg.min_price)
            high = max(open_, close) * (1 + rng.random() * cfg.wick_spread)
            low = min(open_, close) * (1 - rng.random() * cfg.wick_spread)
            candles.append(
                Candle(
                    timestamp=end - (cfg.periods - i) * interval,
                    open=open_,
                    high=high,
                    low=low,
                    close=close,
                    volume=rng.randrange(cfg.volume_min, cfg.volume_max),
                ),
            )
            price = close
        return candles

    def generate_quote(
        self,
        symbol: str,
        reference: SymbolQuote | None = None,
    ) -> SymbolQuote:
        """Perturb a known reference quote by up to +/-1%, or invent one."""
        rng = self._rng
        clean = symbol.strip().upper()

        if reference is not None:
            variation = (rng.random() - 0.5) * self._config.quote_variation
            price = reference.price * (1 + variation)
            change = reference.change + variation * price
            return SymbolQuote(
                symbol=clean,
                name=reference.name,
                price=price,
                change=change,
                change_percent=change_percent(price, change),
            )

        price = 50 + rng.random() * 500
        change = (rng.random() - 0.5) * 20
        return SymbolQuote(
            symbol=clean,
            name=f"{clean} Company",
            price=price,
            change=change,
            change_percent=change_percent(price, change),
        )
