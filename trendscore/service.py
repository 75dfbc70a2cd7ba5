"""Service layer: scoring entry points shared by the HTTP API and the CLI."""

from __future__ import annotations

from typing import Any

from trendscore.calculator import Payload, TrendCalculator
from trendscore.models import RankItem
from trendscore.period import HOUR_MS, POLICIES, PeriodType, parsePeriod, periodName
from trendscore.ranking import STRATEGIES, rankItems
from trendscore.state import AppState


def _calculator(
    state: AppState, item_id: int, period: PeriodType | int | str | None
) -> TrendCalculator:
    p = parsePeriod(period if period is not None else state.config.ranking.default_period)
    return TrendCalculator(
        item_id,
        p,
        sink=state.sink,
        clock=state.clock,
        preview_chars=state.config.diagnostics.preview_chars,
    )


def _envelope(calc: TrendCalculator, strategy: str, result: Any) -> dict:
    if result is None:
        return {
            "item_id": calc.item_id,
            "period": periodName(calc.period),
            "strategy": strategy,
            "result": None,
            "error": "Input could not be parsed",
        }
    return {
        "item_id": calc.item_id,
        "period": periodName(calc.period),
        "strategy": strategy,
        "result": result.model_dump(),
    }


# ── Scoring ──────────────────────────────────────────────────


def svcScoreFull(
    state: AppState,
    item_id: int,
    windows: Payload,
    events: Payload,
    period: PeriodType | int | str | None = None,
) -> dict:
    """Full pipeline over the given windows and events."""
    calc = _calculator(state, item_id, period)
    calc.setWindows(windows)
    calc.setEvents(events)
    out = _envelope(calc, "full", calc.scoreFull())
    out["window_count"] = len(calc.windows)
    out["event_count"] = len(calc.events)
    return out


def svcScoreDirect(
    state: AppState, item_id: int, counters: Payload, period: PeriodType | int | str | None = None
) -> dict:
    calc = _calculator(state, item_id, period)
    return _envelope(calc, "direct", calc.scoreDirect(counters))


def svcScoreApprox(
    state: AppState, item_id: int, counters: Payload, period: PeriodType | int | str | None = None
) -> dict:
    calc = _calculator(state, item_id, period)
    return _envelope(calc, "approx", calc.scoreApprox(counters))


# ── Ranking ──────────────────────────────────────────────────


def svcRank(
    state: AppState,
    items: list[RankItem],
    period: PeriodType | int | str | None = None,
    strategy: str | None = None,
    top_n: int | None = None,
) -> dict:
    """Rank candidates for one period."""
    cfg = state.config.ranking
    strat = strategy or cfg.strategy
    if strat not in STRATEGIES:
        return {"error": f"Unknown strategy {strat!r}", "ranking": []}
    p = parsePeriod(period if period is not None else cfg.default_period)
    ranked = rankItems(
        items,
        p,
        strat,  # type: ignore[arg-type]
        top_n if top_n is not None else cfg.top_n,
        sink=state.sink,
        clock=state.clock,
    )
    return {
        "period": periodName(p),
        "strategy": strat,
        "count": len(ranked),
        "candidates": len(items),
        "ranking": [r.model_dump() for r in ranked],
    }


# ── Reference data ───────────────────────────────────────────


def svcPolicies() -> dict:
    """The constant table every period scores with."""
    return {
        "policies": [
            {
                "period": periodName(p.period),
                "code": int(p.period),
                "lookback_hours": p.lookback_ms // HOUR_MS,
                "compare_hours": p.compare_hours,
                "decay_rate": p.decay_rate,
                "freshness_decay_rate": p.freshness_decay_rate,
                "momentum_weight": p.momentum_weight,
                "diversity_weight": p.diversity_weight,
                "weights": list(p.weights),
            }
            for p in POLICIES.values()
        ]
    }
