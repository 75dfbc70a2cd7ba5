"""Period-keyed scoring constants.

Every weighting and decay constant the engine uses is selected by the ranking horizon.
Unknown codes or names resolve to the daily row.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


class PeriodType(IntEnum):
    DAILY = 0
    WEEKLY = 1
    MONTHLY = 2
    YEARLY = 3


@dataclass(frozen=True)
class PeriodPolicy:
    period: PeriodType
    lookback_ms: int
    compare_hours: int  # width of the recent/previous trend windows
    decay_rate: float  # per hour, direct and approx strategies
    freshness_decay_rate: float  # per hour, full pipeline only
    momentum_weight: float
    diversity_weight: float
    # view, unique, growth, momentum+engagement
    weights: tuple[float, float, float, float]

    def periodStart(self, now_ms: int) -> int:
        return max(0, now_ms - self.lookback_ms)


POLICIES: dict[PeriodType, PeriodPolicy] = {
    PeriodType.DAILY: PeriodPolicy(
        period=PeriodType.DAILY,
        lookback_ms=DAY_MS,
        compare_hours=4,
        decay_rate=0.1,
        freshness_decay_rate=0.1,
        momentum_weight=2.0,
        diversity_weight=1.5,
        weights=(0.4, 0.3, 0.2, 0.1),
    ),
    PeriodType.WEEKLY: PeriodPolicy(
        period=PeriodType.WEEKLY,
        lookback_ms=7 * DAY_MS,
        compare_hours=24,
        decay_rate=0.05,
        freshness_decay_rate=0.05,
        momentum_weight=1.5,
        diversity_weight=1.8,
        weights=(0.3, 0.3, 0.3, 0.1),
    ),
    PeriodType.MONTHLY: PeriodPolicy(
        period=PeriodType.MONTHLY,
        lookback_ms=30 * DAY_MS,
        compare_hours=72,
        decay_rate=0.02,
        freshness_decay_rate=0.02,
        momentum_weight=1.0,
        diversity_weight=2.0,
        weights=(0.2, 0.3, 0.4, 0.1),
    ),
    PeriodType.YEARLY: PeriodPolicy(
        period=PeriodType.YEARLY,
        lookback_ms=365 * DAY_MS,
        compare_hours=168,
        decay_rate=0.005,
        freshness_decay_rate=0.01,
        momentum_weight=0.5,
        diversity_weight=2.5,
        weights=(0.1, 0.3, 0.5, 0.1),
    ),
}

_PERIOD_NAMES: dict[str, PeriodType] = {
    "daily": PeriodType.DAILY,
    "day": PeriodType.DAILY,
    "weekly": PeriodType.WEEKLY,
    "week": PeriodType.WEEKLY,
    "monthly": PeriodType.MONTHLY,
    "month": PeriodType.MONTHLY,
    "yearly": PeriodType.YEARLY,
    "year": PeriodType.YEARLY,
}


def parsePeriod(value: PeriodType | int | str | None) -> PeriodType:
    """Resolve a period code or name ("daily", "week", 2, "3") to a PeriodType."""
    if isinstance(value, PeriodType):
        return value
    if isinstance(value, bool) or value is None:
        return PeriodType.DAILY
    if isinstance(value, int):
        try:
            return PeriodType(value)
        except ValueError:
            return PeriodType.DAILY
    text = str(value).strip().lower()
    if text.isdigit():
        return parsePeriod(int(text))
    return _PERIOD_NAMES.get(text, PeriodType.DAILY)


def policyFor(value: PeriodType | int | str | None) -> PeriodPolicy:
    return POLICIES[parsePeriod(value)]


def periodName(period: PeriodType) -> str:
    return period.name.lower()
