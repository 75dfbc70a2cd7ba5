"""Tests for the full pipeline, direct counter, and approximate counter strategies."""

from __future__ import annotations

import math

import pytest

from tests.conftest import HOUR, NOW, approxCounters, directCounters, event, window
from trendscore.models import ApproxCounters, DirectCounters, Event, TimeWindow
from trendscore.period import PeriodType, policyFor
from trendscore.scoring.strategies import (
    approxMomentum,
    diversityFactor,
    momentumFactor,
    scoreApprox,
    scoreDirect,
    scoreFullPipeline,
    weightedBase,
)

DAILY = policyFor(PeriodType.DAILY)


def _direct(**overrides) -> DirectCounters:
    return DirectCounters.model_validate(directCounters(**overrides))


def _approx(**overrides) -> ApproxCounters:
    return ApproxCounters.model_validate(approxCounters(**overrides))


class TestWeightedBase:
    def test_components(self):
        # 4.0 + 15.0 + 40.0 + 10.0 + 6.75
        base = weightedBase((0.4, 0.3, 0.2, 0.1), 100, 50, 1.0, 1.0, 0.45)
        assert base == pytest.approx(75.75)

    def test_growthClampedIntoZeroToThree(self):
        w = (0.0, 0.0, 1.0, 0.0)
        assert weightedBase(w, 0, 0, 99.0, 0.0, 0.0) == pytest.approx(300.0)
        assert weightedBase(w, 0, 0, -5.0, 0.0, 0.0) == pytest.approx(0.0)


class TestFullPipeline:
    def test_singleLikeEvent(self):
        evs = [Event.model_validate(event(1000, user_id=7, score=1.0, event_type="like"))]
        b = scoreFullPipeline([], evs, DAILY, 0, NOW)

        assert b.result.unique_users == 1
        assert b.result.growth_rate == 2.0
        assert b.result.momentum == 0.5
        assert b.result.engagement == pytest.approx(1.5)
        assert b.weights.quality_factor == 1.0
        # (0.04 + 0.3 + 60 + 7.5 + 22.5) * 1.5
        assert b.base_score == pytest.approx(135.51)
        hours = 1000 / HOUR
        decay = math.exp(-0.1 * hours) * (1.0 + (1.0 - 1000 / (24 * HOUR)) * 0.5)
        assert b.time_decayed_score == pytest.approx(135.51 * decay)
        assert b.result.score == pytest.approx(193.10, abs=0.011)

    def test_windowsOnly(self):
        ws = [TimeWindow.model_validate(window(h, v, 5)) for h, v in ((2, 10), (1, 20), (0, 30))]
        b = scoreFullPipeline(ws, [], DAILY, 0, NOW)

        assert b.combined.total_views == 60
        # window estimate 13 -> 13 * 0.75 + 1 * 0.75
        assert b.combined.unique_users == 10
        assert b.combined.growth_rate == 2.0
        assert b.combined.momentum == pytest.approx(0.75)
        assert b.base_score == pytest.approx(74.15)
        # no events: last activity is now, full freshness boost
        assert b.time_decay == 1.0
        assert b.freshness_boost == 0.5
        assert b.time_decayed_score == pytest.approx(74.15 * 1.5)
        assert b.result.score == pytest.approx(105.66, abs=0.011)

    def test_emptyInputs(self):
        b = scoreFullPipeline([], [], DAILY, 0, NOW)
        assert b.base_score == pytest.approx(25.3)
        assert b.result.score == pytest.approx(36.05, abs=0.011)
        assert b.result.growth_rate == 0.0
        assert b.result.unique_users == 1

    def test_yearlyUsesFreshnessRate(self):
        evs = [Event.model_validate(event(10 * HOUR))]
        yearly = policyFor(PeriodType.YEARLY)
        b = scoreFullPipeline([], evs, yearly, 0, NOW)
        boost = 1.0 + (1.0 - 10 / (365 * 24)) * 0.5
        assert b.time_decayed_score == pytest.approx(b.base_score * math.exp(-0.1) * boost)

    def test_qualityFactorUsesWholeBuffer(self):
        old = Event.model_validate(event(48 * HOUR, event_type="bookmark"))
        b = scoreFullPipeline([], [old], DAILY, 0, NOW)
        assert b.event_stats.total_views == 0
        assert b.weights.bookmark_ratio == 1.0


class TestDirect:
    def test_goldenValue(self):
        r = scoreDirect(_direct(), DAILY, 0, NOW)
        assert r.base_score == 159.0
        assert r.time_decay == 1.0
        assert r.momentum_factor == pytest.approx(math.log10(2) * 2.0)
        assert r.diversity_factor == 1.0
        expected = 159.0 * (1.0 + math.log10(2) * 2.0) * 0.95
        assert r.score == pytest.approx(round(expected, 2))
        assert r.score == pytest.approx(241.99)

    @pytest.mark.parametrize("period", list(PeriodType))
    def test_momentumWeightPerPeriod(self, period):
        policy = policyFor(period)
        r = scoreDirect(_direct(), policy, 0, NOW)
        assert r.momentum_factor == pytest.approx(math.log10(2) * policy.momentum_weight)

    def test_diversity(self):
        r = scoreDirect(
            _direct(total_views_all_time=200, total_unique_users_all_time=50), DAILY, 0, NOW
        )
        assert r.diversity_factor == pytest.approx(1.375)
        assert diversityFactor(5, 0, 2.0) == 1.0

    def test_decayByHoursSinceUpdate(self):
        r = scoreDirect(_direct(last_updated=NOW - 10 * HOUR), DAILY, 0, NOW)
        assert r.time_decay == pytest.approx(math.exp(-1.0))

    def test_futureUpdateDoesNotBoost(self):
        r = scoreDirect(_direct(last_updated=NOW + HOUR), DAILY, 0, NOW)
        assert r.time_decay == 1.0

    def test_previousRateFloor(self):
        # 1.0 / 0.01 = 100
        assert momentumFactor(1.0, 0.0, 1.0) == pytest.approx(math.log10(101))

    def test_momentumCapped(self):
        assert momentumFactor(1e6, 0.0, 2.0) == 5.0

    def test_fallingRateGivesNegativeFactor(self):
        assert momentumFactor(-0.5, 1.0, 2.0) == pytest.approx(math.log10(0.5) * 2.0)

    def test_fallingRateLowersScore(self):
        r = scoreDirect(_direct(current_increase_rate=-0.5), DAILY, 0, NOW)
        assert r.momentum_factor == pytest.approx(-0.60206, abs=1e-5)
        assert r.score == pytest.approx(60.11)

    def test_accelerationAtOrBelowMinusOneIsNeutral(self):
        assert momentumFactor(-1.0, 1.0, 2.0) == 0.0
        assert momentumFactor(-5.0, 1.0, 2.0) == 0.0

    def test_noActivity(self):
        r = scoreDirect(
            _direct(view_increase=0, like_increase=0, bookmark_count=0, comment_increase=0),
            DAILY,
            0,
            NOW,
        )
        assert r.score == 0.0


class TestApprox:
    def test_noBaseline(self):
        b = scoreApprox(_approx(), DAILY, 0, NOW)
        assert b.result.growth_rate == 1.0
        assert b.result.momentum == 1.0
        assert b.result.engagement == pytest.approx(0.45)
        assert b.result.unique_users == 50
        assert b.base_score == pytest.approx(75.75)
        assert b.time_decay == 1.0
        assert b.result.score == pytest.approx(71.96)

    def test_growthFromPreviousCount(self):
        b = scoreApprox(_approx(view_count=150, previous_view_count=100), DAILY, 0, NOW)
        assert b.result.growth_rate == pytest.approx(0.5)

    def test_growthReportedUnclamped(self):
        b = scoreApprox(_approx(view_count=1000, previous_view_count=10), DAILY, 0, NOW)
        assert b.result.growth_rate == pytest.approx(99.0)

    def test_momentumBounds(self):
        assert approxMomentum(0.0) == 0.0
        assert approxMomentum(1e9) == 2.0
        assert approxMomentum(0.001) == pytest.approx(-1.5)
        assert approxMomentum(10.0) == pytest.approx(0.5)

    def test_lowRateMomentumIsNotFloored(self):
        b = scoreApprox(_approx(view_count_per_hour=0.001), DAILY, 0, NOW)
        assert b.result.momentum == pytest.approx(-1.5)
        # 4.0 + 15.0 + 40.0 - 2.5 + 6.75
        assert b.base_score == pytest.approx(63.25)

    def test_zeroViewsHasNoEngagement(self):
        b = scoreApprox(_approx(view_count=0), DAILY, 0, NOW)
        assert b.result.engagement == 0.0

    def test_decayUsesWholeHours(self):
        b = scoreApprox(_approx(last_activity_time=NOW - 90 * 60 * 1000), DAILY, 0, NOW)
        assert b.time_decay == pytest.approx(math.exp(-0.1))

    def test_noFreshnessBoost(self):
        b = scoreApprox(_approx(), DAILY, 0, NOW)
        assert b.result.score == pytest.approx(round(b.base_score * 0.95, 2))
