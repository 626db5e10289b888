"""Timeframe label resolution.

Maps a chart timeframe label ("1h", "3d", "2M", ...) to the native base
unit a provider is asked for and the aggregation factor applied afterwards.
The whitelist table is built once from TimeframeConfig; resolving is a
dict lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from chartfeed.config import BASE_UNIT_MS, TimeframeConfig


@dataclass(frozen=True)
class Resolution:
    """A resolved timeframe.

    ``lookback`` is how far back a provider should request base candles so
    that at least one full output bucket exists after aggregation.
    """

    label: str
    base: str
    factor: int
    lookback: timedelta

    @property
    def base_ms(self) -> int:
        """Length of one base-unit candle in milliseconds."""
        return BASE_UNIT_MS[self.base]

    @property
    def interval_ms(self) -> int:
        """Length of one output candle in milliseconds."""
        return self.base_ms * self.factor

    @property
    def lookback_bars(self) -> int:
        """Approximate number of base candles covered by the lookback."""
        return max(1, int(self.lookback.total_seconds() * 1000 // self.base_ms))


class TimeframeResolver:
    """Resolves timeframe labels against a fixed whitelist.

    Native base units resolve to themselves with factor 1. Whitelisted
    compounds resolve to the base unit with the same suffix. Anything else
    resolves with factor 1 to the fallback base configured for its suffix,
    or to the unrecognized-label fallback.
    """

    def __init__(self, config: TimeframeConfig | None = None) -> None:
        self._config = config if config is not None else TimeframeConfig()
        self._table: dict[str, tuple[str, int]] = {
            base: (base, 1) for base in BASE_UNIT_MS
        }
        bases_by_suffix = {base[-1]: base for base in BASE_UNIT_MS}
        for label in self._config.compounds:
            self._table[label] = (bases_by_suffix[label[-1]], int(label[:-1]))

    @property
    def supported(self) -> list[str]:
        """All labels resolved without fallback, in table order."""
        return list(self._table)

    def is_supported(self, label: str) -> bool:
        return label in self._table

    def resolve(self, label: str) -> Resolution:
        """Resolve a label. Never raises for unknown labels."""
        entry = self._table.get(label)
        if entry is None:
            entry = (self._fallback_base(label), 1)
        base, factor = entry
        return Resolution(
            label=label,
            base=base,
            factor=factor,
            lookback=self._lookback(base, factor),
        )

    def _lookback(self, base: str, factor: int) -> timedelta:
        days = min(
            self._config.lookback_days[base] * factor,
            self._config.max_lookback_days,
        )
        return timedelta(days=days)

    def _fallback_base(self, label: str) -> str:
        count, suffix = label[:-1], label[-1:]
        if count.isdigit() and suffix in self._config.coarser_fallback:
            return self._config.coarser_fallback[suffix]
        return self._config.unrecognized_fallback
