"""Time decay, freshness boost and the per-item uniqueness jitter."""

from __future__ import annotations

import math
from collections.abc import Sequence

from trendscore.models import Event
from trendscore.period import HOUR_MS

MAX_FRESHNESS_BOOST = 0.5


def hoursBetween(earlier_ms: int, later_ms: int) -> float:
    """Elapsed hours, never negative."""
    return max(0, later_ms - earlier_ms) / HOUR_MS


def timeDecay(decay_rate: float, hours_elapsed: float) -> float:
    """exp(-rate * hours); in (0, 1] for non-negative inputs."""
    return math.exp(-decay_rate * max(0.0, hours_elapsed))


def lastActivity(events: Sequence[Event], now_ms: int) -> int:
    if not events:
        return now_ms
    return max(e.timestamp for e in events)


def freshnessBoost(last_activity_ms: int, period_start: int, now_ms: int) -> float:
    """Up to +0.5 when the last activity sits at the very end of the period."""
    span = now_ms - period_start
    if span <= 0:
        return 0.0
    position = (now_ms - last_activity_ms) / span
    position = min(1.0, max(0.0, position))
    return (1.0 - position) * MAX_FRESHNESS_BOOST


def decayFactor(
    decay_rate: float, last_activity_ms: int, period_start: int, now_ms: int
) -> tuple[float, float]:
    """Return (time_decay, freshness_boost); the score multiplier is decay * (1 + boost)."""
    decay = timeDecay(decay_rate, hoursBetween(last_activity_ms, now_ms))
    return decay, freshnessBoost(last_activity_ms, period_start, now_ms)


def uniquenessFactor(item_id: int) -> float:
    """Stable multiplier in [0.95, 1.049] that separates otherwise identical items."""
    return 0.95 + (item_id % 100) / 1000.0


def roundScore(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    scaled = value * 100.0
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 100.0


def applyJitter(raw_score: float, item_id: int) -> float:
    return roundScore(raw_score * uniquenessFactor(item_id))
