"""Merge window-derived and event-derived statistics."""

from __future__ import annotations

from trendscore.models import IntermediateStats

# Share of each source's users assumed not to appear in the other.
UNIQUE_OVERLAP_KEEP = 0.75


def combineUniqueUsers(window_unique: int, event_unique: int) -> int:
    """Heuristic de-duplication across sources.

    Each side is floored at 1 before weighting, so the result is never below 1 even
    when both sources report no users.
    """
    return int(
        max(window_unique, 1) * UNIQUE_OVERLAP_KEEP + max(event_unique, 1) * UNIQUE_OVERLAP_KEEP
    )


def combineStats(window: IntermediateStats, recent: IntermediateStats) -> IntermediateStats:
    """Event values win for growth and momentum when non-zero; engagement is events-only."""
    return IntermediateStats(
        total_views=window.total_views + recent.total_views,
        unique_users=combineUniqueUsers(window.unique_users, recent.unique_users),
        growth_rate=recent.growth_rate if recent.growth_rate != 0.0 else window.growth_rate,
        momentum=recent.momentum if recent.momentum != 0.0 else window.momentum,
        engagement=recent.engagement,
    )
