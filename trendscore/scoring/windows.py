"""Reduce pre-aggregated time windows to period statistics."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence

from trendscore.models import IntermediateStats, TimeWindow
from trendscore.scoring.trend import growthAndMomentum, hourKey

# Each extra window is assumed to repeat ~5% of the users already counted.
WINDOW_OVERLAP_RATE = 0.05


def windowsInPeriod(
    windows: Sequence[TimeWindow], period_start: int, now_ms: int
) -> list[TimeWindow]:
    """Windows that overlap [period_start, now]."""
    return [w for w in windows if w.end_time >= period_start and w.start_time <= now_ms]


def correctedUniqueUsers(raw_unique: int, window_count: int) -> int:
    if window_count <= 0:
        return 0
    return int(raw_unique * (1.0 / (1.0 + window_count * WINDOW_OVERLAP_RATE)))


def aggregateWindows(
    windows: Sequence[TimeWindow], period_start: int, now_ms: int, compare_hours: int
) -> IntermediateStats:
    """Total views, corrected unique users and trend from windows in the period.

    Engagement is not observable at window granularity and is always 0.
    """
    relevant = windowsInPeriod(windows, period_start, now_ms)
    if not relevant:
        return IntermediateStats()

    hourly: dict[int, int] = defaultdict(int)
    total_views = 0
    raw_unique = 0
    for w in relevant:
        total_views += w.total_views
        raw_unique += w.unique_users
        hourly[hourKey(w.start_time)] += w.total_views

    growth, mom = growthAndMomentum(hourly, now_ms, compare_hours)
    return IntermediateStats(
        total_views=total_views,
        unique_users=correctedUniqueUsers(raw_unique, len(relevant)),
        growth_rate=growth,
        momentum=mom,
        engagement=0.0,
    )
