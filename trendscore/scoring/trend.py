"""Growth rate and momentum from an hourly activity histogram."""

from __future__ import annotations

from collections.abc import Mapping

from trendscore.period import HOUR_MS

GROWTH_FLOOR = -1.0
NEW_ACTIVITY_GROWTH = 2.0
MOMENTUM_MIN = -1.0
MOMENTUM_MAX = 2.0
MOMENTUM_FALLBACK = 0.5
MIN_MOMENTUM_BUCKETS = 3


def hourKey(timestamp_ms: int) -> int:
    return timestamp_ms // HOUR_MS


def _fallbackMomentum(growth_rate: float) -> float:
    return MOMENTUM_FALLBACK if growth_rate > 0 else 0.0


def growthRate(recent: int, previous: int) -> float:
    """Relative change between the recent and previous windows, floored at -1."""
    if previous == 0:
        return NEW_ACTIVITY_GROWTH if recent > 0 else 0.0
    return max(GROWTH_FLOOR, (recent - previous) / previous)


def momentum(recent_counts: list[int], growth_rate: float) -> float:
    """Mean relative delta across consecutive recent buckets, clamped to [-1, 2].

    Falls back to 0.5 (growing) or 0.0 when there are too few buckets or no bucket
    with a non-zero predecessor.
    """
    if len(recent_counts) < MIN_MOMENTUM_BUCKETS:
        return _fallbackMomentum(growth_rate)
    slopes = [
        (cur - prev) / prev
        for prev, cur in zip(recent_counts, recent_counts[1:])
        if prev > 0
    ]
    if not slopes:
        return _fallbackMomentum(growth_rate)
    avg = sum(slopes) / len(slopes)
    return max(MOMENTUM_MIN, min(MOMENTUM_MAX, avg))


def growthAndMomentum(
    hourly_counts: Mapping[int, int], now_ms: int, compare_hours: int
) -> tuple[float, float]:
    """Compare the last `compare_hours` against the `compare_hours` before them.

    Returns (growth_rate, momentum).
    """
    if not hourly_counts:
        return 0.0, 0.0

    buckets = sorted(hourly_counts.items())
    current_hour = hourKey(now_ms)

    recent = 0
    previous = 0
    recent_counts: list[int] = []
    for hour, count in buckets:
        hours_ago = max(0, current_hour - hour)
        if hours_ago < compare_hours:
            recent += count
            recent_counts.append(count)
        elif hours_ago < compare_hours * 2:
            previous += count

    growth = growthRate(recent, previous)
    if len(buckets) < MIN_MOMENTUM_BUCKETS:
        return growth, _fallbackMomentum(growth)
    return growth, momentum(recent_counts, growth)
