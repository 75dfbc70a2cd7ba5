"""The three scoring strategies built on the aggregation and decay primitives.

- full: windows + events -> combined stats -> weighted base -> decay with freshness -> jitter
- direct: pre-summarized deltas -> closed-form base -> decay -> momentum -> diversity -> jitter
- approx: approximate-distinct counters -> weighted base -> decay -> jitter
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from trendscore.models import (
    ApproxCounters,
    DirectCounters,
    Event,
    EventWeights,
    IntermediateStats,
    TimeWindow,
    TrendingResult,
    TrendStats,
)
from trendscore.period import HOUR_MS, PeriodPolicy
from trendscore.scoring.combine import combineStats
from trendscore.scoring.decay import (
    applyJitter,
    decayFactor,
    hoursBetween,
    lastActivity,
    timeDecay,
    uniquenessFactor,
)
from trendscore.scoring.events import (
    BOOKMARK,
    COMMENT,
    ENGAGEMENT_POINTS,
    LIKE,
    analyzeEventDistribution,
    processEvents,
)
from trendscore.scoring.windows import aggregateWindows

VIEW_SCALE = 0.1
GROWTH_SCALE = 100.0
MOMENTUM_SCALE = 50.0
ENGAGEMENT_SCALE = 3.0
QUALITY_BOOST = 0.5

# Direct-counter base weights per interaction.
DIRECT_POINTS = {"view": 1.0, "like": 3.0, "bookmark": 5.0, "comment": 2.0}
MIN_PREVIOUS_RATE = 0.01
MAX_MOMENTUM_FACTOR = 5.0

APPROX_NO_BASELINE_GROWTH = 1.0
APPROX_MOMENTUM_SCALE = 0.5


def weightedBase(
    weights: tuple[float, float, float, float],
    total_views: float,
    unique_users: float,
    growth_rate: float,
    momentum: float,
    engagement: float,
) -> float:
    """Weighted sum of normalized metrics.

    Growth is clamped to [-1, 2] and shifted to [0, 3]; momentum is shifted by +1;
    engagement is scaled by 3 to share the momentum range.
    """
    w_view, w_unique, w_growth, w_trend = weights
    normalized_growth = max(-1.0, min(2.0, growth_rate)) + 1.0
    normalized_momentum = momentum + 1.0
    normalized_engagement = engagement * ENGAGEMENT_SCALE
    return (
        total_views * VIEW_SCALE * w_view
        + unique_users * w_unique
        + normalized_growth * GROWTH_SCALE * w_growth
        + normalized_momentum * MOMENTUM_SCALE * w_trend
        + normalized_engagement * MOMENTUM_SCALE * w_trend
    )


# ── Full pipeline ────────────────────────────────────────────


@dataclass(frozen=True)
class FullBreakdown:
    period_start: int
    window_stats: IntermediateStats
    event_stats: IntermediateStats
    combined: IntermediateStats
    weights: EventWeights
    base_score: float
    time_decay: float
    freshness_boost: float
    time_decayed_score: float
    uniqueness_factor: float
    result: TrendStats


def baseScore(policy: PeriodPolicy, stats: IntermediateStats, weights: EventWeights) -> float:
    quality_multiplier = 1.0 + weights.quality_factor * QUALITY_BOOST
    weighted = weightedBase(
        policy.weights,
        stats.total_views,
        stats.unique_users,
        stats.growth_rate,
        stats.momentum,
        stats.engagement,
    )
    return weighted * quality_multiplier


def scoreFullPipeline(
    windows: Sequence[TimeWindow],
    events: Sequence[Event],
    policy: PeriodPolicy,
    item_id: int,
    now_ms: int,
) -> FullBreakdown:
    period_start = policy.periodStart(now_ms)
    window_stats = aggregateWindows(windows, period_start, now_ms, policy.compare_hours)
    event_stats = processEvents(events, period_start, now_ms, policy.compare_hours)
    combined = combineStats(window_stats, event_stats)
    weights = analyzeEventDistribution(events)

    base = baseScore(policy, combined, weights)
    decay, boost = decayFactor(
        policy.freshness_decay_rate, lastActivity(events, now_ms), period_start, now_ms
    )
    decayed = base * decay * (1.0 + boost)
    result = TrendStats(
        score=applyJitter(decayed, item_id),
        growth_rate=combined.growth_rate,
        momentum=combined.momentum,
        engagement=combined.engagement,
        unique_users=combined.unique_users,
    )
    return FullBreakdown(
        period_start=period_start,
        window_stats=window_stats,
        event_stats=event_stats,
        combined=combined,
        weights=weights,
        base_score=base,
        time_decay=decay,
        freshness_boost=boost,
        time_decayed_score=decayed,
        uniqueness_factor=uniquenessFactor(item_id),
        result=result,
    )


# ── Direct counters ──────────────────────────────────────────


def momentumFactor(current_rate: float, previous_rate: float, momentum_weight: float) -> float:
    """log10 of the rate acceleration, weighted and capped at 5.

    A falling rate gives a negative factor. At or below -1 acceleration the log is
    undefined and the factor is 0.
    """
    acceleration = current_rate / max(previous_rate, MIN_PREVIOUS_RATE)
    if acceleration + 1.0 <= 0.0:
        return 0.0
    return min(MAX_MOMENTUM_FACTOR, math.log10(acceleration + 1.0) * momentum_weight)


def diversityFactor(unique_all_time: int, views_all_time: int, diversity_weight: float) -> float:
    ratio = unique_all_time / views_all_time if views_all_time > 0 else 0.0
    return 1.0 + ratio * diversity_weight


def scoreDirect(
    counters: DirectCounters, policy: PeriodPolicy, item_id: int, now_ms: int
) -> TrendingResult:
    base = (
        counters.view_increase * DIRECT_POINTS["view"]
        + counters.like_increase * DIRECT_POINTS["like"]
        + counters.bookmark_count * DIRECT_POINTS["bookmark"]
        + counters.comment_increase * DIRECT_POINTS["comment"]
    )
    decay = timeDecay(policy.decay_rate, hoursBetween(counters.last_updated, now_ms))
    mom = momentumFactor(
        counters.current_increase_rate, counters.previous_increase_rate, policy.momentum_weight
    )
    diversity = diversityFactor(
        counters.total_unique_users_all_time,
        counters.total_views_all_time,
        policy.diversity_weight,
    )
    raw = base * decay * (1.0 + mom) * diversity
    return TrendingResult(
        score=applyJitter(raw, item_id),
        base_score=base,
        time_decay=decay,
        momentum_factor=mom,
        diversity_factor=diversity,
    )


# ── Approximate distinct counters ────────────────────────────


@dataclass(frozen=True)
class ApproxBreakdown:
    base_score: float
    time_decay: float
    uniqueness_factor: float
    result: TrendStats


def approxGrowth(view_count: int, previous_view_count: int) -> float:
    if previous_view_count > 0:
        return (view_count - previous_view_count) / previous_view_count
    return APPROX_NO_BASELINE_GROWTH


def approxMomentum(views_per_hour: float) -> float:
    if views_per_hour <= 0:
        return 0.0
    return min(2.0, math.log10(views_per_hour) * APPROX_MOMENTUM_SCALE)


def approxEngagement(counters: ApproxCounters) -> float:
    if counters.view_count <= 0:
        return 0.0
    raw = (
        counters.like_count * ENGAGEMENT_POINTS[LIKE]
        + counters.comment_count * ENGAGEMENT_POINTS[COMMENT]
        + counters.bookmark_count * ENGAGEMENT_POINTS[BOOKMARK]
    )
    return raw / counters.view_count


def scoreApprox(
    counters: ApproxCounters, policy: PeriodPolicy, item_id: int, now_ms: int
) -> ApproxBreakdown:
    growth = approxGrowth(counters.view_count, counters.previous_view_count)
    mom = approxMomentum(counters.view_count_per_hour)
    engagement = approxEngagement(counters)

    base = weightedBase(
        policy.weights, counters.view_count, counters.unique_users, growth, mom, engagement
    )
    # whole hours only
    hours = max(0, now_ms - counters.last_activity_time) // HOUR_MS
    decay = timeDecay(policy.decay_rate, hours)

    result = TrendStats(
        score=applyJitter(base * decay, item_id),
        growth_rate=growth,
        momentum=mom,
        engagement=engagement,
        unique_users=counters.unique_users,
    )
    return ApproxBreakdown(
        base_score=base,
        time_decay=decay,
        uniqueness_factor=uniquenessFactor(item_id),
        result=result,
    )
