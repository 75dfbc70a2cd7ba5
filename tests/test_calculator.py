"""Tests for TrendCalculator: buffers, malformed input, checkpoints, determinism."""

from __future__ import annotations

import json
import math

import pytest

from tests.conftest import HOUR, NOW, approxCounters, directCounters, event, fixedClock, window
from trendscore.calculator import TrendCalculator
from trendscore.diagnostics import MemorySink
from trendscore.period import PeriodType


def _calc(item_id: int = 0, period=PeriodType.DAILY, sink=None) -> TrendCalculator:
    return TrendCalculator(item_id, period, sink=sink, clock=fixedClock)


class TestBuffers:
    def test_initEmitsCheckpoint(self, sink: MemorySink):
        _calc(42, PeriodType.WEEKLY, sink)
        (rec,) = sink.records
        assert rec.action == "init"
        assert rec.item_id == 42
        assert rec.payload == {"item_id": 42, "period_type": 1}

    def test_setWindowsFromJsonText(self, sink: MemorySink):
        calc = _calc(sink=sink)
        calc.setWindows(json.dumps([window(1, 10, 3), window(0, 5, 2)]))
        assert len(calc.windows) == 2
        rec = sink.byAction("set_windows")[0]
        assert rec.payload["count"] == 2
        assert rec.payload["sample"]["metrics"]["total_views"] == 10

    def test_setEventsFromDecodedList(self):
        calc = _calc()
        calc.setEvents([event(100, event_type="like"), event(200)])
        assert [e.category for e in calc.events] == ["like", None]

    def test_setIsWholesaleReplacement(self):
        calc = _calc()
        calc.setEvents([event(100), event(200), event(300)])
        calc.setEvents([event(50)])
        assert len(calc.events) == 1
        calc.setWindows([window(0, 1)])
        calc.setWindows([])
        assert calc.windows == ()

    def test_malformedJsonKeepsBuffer(self, sink: MemorySink):
        calc = _calc(sink=sink)
        calc.setEvents([event(100)])
        calc.setEvents("{not json")
        assert len(calc.events) == 1
        err = sink.byAction("error")[0]
        assert err.payload["input_preview"] == "{not json"
        assert err.payload["error"]

    def test_wrongShapeKeepsBuffer(self):
        calc = _calc()
        calc.setWindows([window(0, 5)])
        calc.setWindows([{"start_time": "soon"}])
        assert len(calc.windows) == 1

    def test_errorPreviewIsTruncated(self, sink: MemorySink):
        calc = _calc(sink=sink)
        calc.setWindows("x" * 250)
        preview = sink.byAction("error")[0].payload["input_preview"]
        assert preview == "x" * 100 + "..."

    def test_previewLengthIsConfigurable(self, sink: MemorySink):
        calc = TrendCalculator(0, sink=sink, clock=fixedClock, preview_chars=10)
        calc.setEvents("y" * 50)
        assert sink.byAction("error")[0].payload["input_preview"] == "y" * 10 + "..."


class TestScoreFull:
    def test_checkpointOrder(self, sink: MemorySink):
        calc = _calc(sink=sink)
        calc.setWindows([window(0, 10, 2)])
        sink.clear()
        result = calc.scoreFull()
        assert result is not None
        assert sink.actions() == [
            "start",
            "base_stats",
            "recent_stats",
            "event_distribution",
            "final_score",
        ]
        final = sink.byAction("final_score")[0].payload
        assert final["final_score"] == result.score
        assert final["uniqueness_factor"] == 0.95

    def test_finalScoreReportsDecaySplit(self, sink: MemorySink):
        calc = _calc(sink=sink)
        calc.setEvents([event(2 * HOUR, event_type="like")])
        calc.scoreFull()
        final = sink.byAction("final_score")[0].payload
        assert final["time_decay"] == pytest.approx(math.exp(-0.2))
        assert final["freshness_boost"] == pytest.approx((1.0 - 2 / 24) * 0.5)
        assert final["time_decayed_score"] == pytest.approx(
            final["base_score"] * final["time_decay"] * (1.0 + final["freshness_boost"])
        )

    def test_singleEventScore(self):
        calc = _calc()
        calc.setEvents([event(1000, user_id=7, event_type="like")])
        result = calc.scoreFull()
        assert result.unique_users == 1
        assert result.growth_rate == 2.0
        assert result.momentum == 0.5
        assert result.score == pytest.approx(193.10, abs=0.011)

    def test_emptyBuffersStillScore(self):
        assert _calc().scoreFull().score == pytest.approx(36.05, abs=0.011)

    def test_outOfPeriodWindowsAreIgnored(self):
        a = _calc()
        a.setWindows([window(0, 10, 2)])
        b = _calc()
        b.setWindows([window(0, 10, 2), window(200, 99999, 999)])
        assert a.scoreFull() == b.scoreFull()

    def test_deterministic(self):
        def run():
            calc = _calc(17)
            calc.setWindows([window(3, 40, 10), window(1, 60, 12)])
            calc.setEvents([event(HOUR, user_id=u, event_type="comment") for u in range(5)])
            return calc.scoreFull()

        assert run() == run()

    def test_jitterSeparatesIdenticalItems(self):
        scores = []
        for item_id in (0, 99):
            calc = _calc(item_id)
            calc.setWindows([window(0, 100, 20)])
            scores.append(calc.scoreFull().score)
        low, high = scores
        assert high > low
        assert high / low == pytest.approx(1.049 / 0.95, rel=1e-3)

    def test_periodByName(self):
        calc = TrendCalculator(0, "monthly", clock=fixedClock)
        assert calc.period == PeriodType.MONTHLY
        assert calc.policy.compare_hours == 72

    def test_unknownPeriodFallsBackToDaily(self):
        assert TrendCalculator(0, 9, clock=fixedClock).period == PeriodType.DAILY

    def test_failingSinkDoesNotChangeResult(self):
        class Boom:
            def record(self, *args):
                raise RuntimeError("sink down")

        quiet = _calc()
        quiet.setEvents([event(500, event_type="bookmark")])
        noisy = _calc(sink=Boom())
        noisy.setEvents([event(500, event_type="bookmark")])
        assert noisy.scoreFull() == quiet.scoreFull()


class TestScoreDirect:
    def test_result(self, sink: MemorySink):
        calc = _calc(sink=sink)
        r = calc.scoreDirect(json.dumps(directCounters()))
        assert r is not None
        assert r.score == pytest.approx(241.99)
        assert sink.actions()[-2:] == ["start", "result"]

    def test_acceptsDict(self):
        assert _calc().scoreDirect(directCounters()).base_score == 159.0

    @pytest.mark.parametrize(
        "payload",
        [
            "garbage",
            json.dumps({"view_increase": 1}),
            directCounters(like_increase=-1),
            directCounters(current_increase_rate=float("nan")),
            directCounters(previous_increase_rate=float("inf")),
        ],
    )
    def test_malformedReturnsNone(self, payload, sink: MemorySink):
        calc = _calc(sink=sink)
        assert calc.scoreDirect(payload) is None
        assert sink.actions()[-1] == "error"

    def test_usesPeriodWeights(self):
        daily = _calc(period=PeriodType.DAILY).scoreDirect(directCounters())
        yearly = _calc(period=PeriodType.YEARLY).scoreDirect(directCounters())
        assert daily.momentum_factor > yearly.momentum_factor


class TestScoreApprox:
    def test_result(self, sink: MemorySink):
        calc = _calc(sink=sink)
        r = calc.scoreApprox(approxCounters())
        assert r.score == pytest.approx(71.96)
        rec = sink.byAction("hll_score")[0]
        assert rec.payload["final_score"] == r.score
        assert rec.payload["view_count"] == 100

    @pytest.mark.parametrize(
        "payload",
        [
            b"\x00\x01",
            {"unique_users": 3},
            approxCounters(view_count=-5),
            approxCounters(view_count_per_hour=float("nan")),
        ],
    )
    def test_malformedReturnsNone(self, payload):
        assert _calc().scoreApprox(payload) is None

    def test_staleActivityDecays(self):
        fresh = _calc().scoreApprox(approxCounters())
        stale = _calc().scoreApprox(approxCounters(last_activity_time=NOW - 48 * HOUR))
        assert stale.score < fresh.score


class TestTestLog:
    def test_emitsTestCheckpoint(self, sink: MemorySink):
        calc = _calc(5, sink=sink)
        calc.testLog("hello")
        rec = sink.records[-1]
        assert (rec.item_id, rec.action, rec.message) == (5, "test", "hello")

    def test_noSinkIsFine(self):
        _calc().testLog("nobody listening")
