"""Raw event reduction and interaction-category analysis."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence

from trendscore.models import Event, EventWeights, IntermediateStats
from trendscore.scoring.trend import growthAndMomentum, hourKey

LIKE = "like"
COMMENT = "comment"
BOOKMARK = "bookmark"

# Engagement points per interaction when adjusting the average engagement score.
ENGAGEMENT_POINTS = {LIKE: 2.0, COMMENT: 3.0, BOOKMARK: 5.0}
# Quality multipliers: comments and bookmarks count more than likes.
QUALITY_POINTS = {LIKE: 1.0, COMMENT: 2.0, BOOKMARK: 3.0}


def eventsInPeriod(events: Sequence[Event], period_start: int, now_ms: int) -> list[Event]:
    return [e for e in events if period_start <= e.timestamp <= now_ms]


def countCategories(events: Iterable[Event]) -> Counter[str]:
    """Count like/comment/bookmark events; other or missing categories are ignored."""
    counts: Counter[str] = Counter()
    for e in events:
        if e.category in ENGAGEMENT_POINTS:
            counts[e.category] += 1
    return counts


def processEvents(
    events: Sequence[Event], period_start: int, now_ms: int, compare_hours: int
) -> IntermediateStats:
    """Event count, exact unique users, weighted engagement and trend for the period."""
    recent = eventsInPeriod(events, period_start, now_ms)
    if not recent:
        return IntermediateStats()

    n = len(recent)
    unique_users = len({e.user_id for e in recent})
    counts = countCategories(recent)

    avg_engagement = sum(e.engagement_score for e in recent) / n
    adjusted = sum(ENGAGEMENT_POINTS[c] * counts[c] for c in ENGAGEMENT_POINTS) / max(1, n)
    engagement = (avg_engagement + adjusted) / 2.0

    hourly: dict[int, int] = defaultdict(int)
    for e in recent:
        hourly[hourKey(e.timestamp)] += 1

    growth, mom = growthAndMomentum(hourly, now_ms, compare_hours)
    return IntermediateStats(
        total_views=n,
        unique_users=unique_users,
        growth_rate=growth,
        momentum=mom,
        engagement=engagement,
    )


def analyzeEventDistribution(events: Sequence[Event]) -> EventWeights:
    """Category ratios over the whole buffer (not period-filtered) and a quality factor."""
    if not events:
        return EventWeights()

    total = len(events)
    counts = countCategories(events)
    like_ratio = counts[LIKE] / total
    comment_ratio = counts[COMMENT] / total
    bookmark_ratio = counts[BOOKMARK] / total
    quality = (
        like_ratio * QUALITY_POINTS[LIKE]
        + comment_ratio * QUALITY_POINTS[COMMENT]
        + bookmark_ratio * QUALITY_POINTS[BOOKMARK]
    )
    return EventWeights(
        like_ratio=like_ratio,
        comment_ratio=comment_ratio,
        bookmark_ratio=bookmark_ratio,
        quality_factor=quality,
    )
