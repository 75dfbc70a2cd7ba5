"""Batch ranking: score many items for a period and keep the top N."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Literal

from trendscore.calculator import Clock, TrendCalculator
from trendscore.diagnostics.base import DiagnosticSink
from trendscore.models import RankedItem, RankItem
from trendscore.period import PeriodType, parsePeriod, periodName

logger = logging.getLogger("trendscore")

Strategy = Literal["full", "direct", "approx"]
STRATEGIES: tuple[str, ...] = ("full", "direct", "approx")
DEFAULT_TOP_N = 1000


def _scoreItem(
    item: RankItem,
    period: PeriodType,
    strategy: str,
    sink: DiagnosticSink | None,
    clock: Clock | None,
) -> tuple[float, dict] | None:
    """Run one item through its strategy. None when the item lacks the inputs or fails."""
    calc = TrendCalculator(item.item_id, period, sink=sink, clock=clock)
    if strategy == "direct":
        if item.direct is None:
            return None
        result = calc.scoreDirect(item.direct.model_dump())
    elif strategy == "approx":
        if item.approx is None:
            return None
        result = calc.scoreApprox(item.approx.model_dump())
    else:
        calc.setWindows([w.model_dump() for w in item.windows])
        calc.setEvents([e.model_dump() for e in item.events])
        result = calc.scoreFull()
    if result is None:
        return None
    details = result.model_dump()
    return details.pop("score"), details


def rankItems(
    items: Iterable[RankItem],
    period: PeriodType | int | str = PeriodType.DAILY,
    strategy: Strategy = "full",
    top_n: int = DEFAULT_TOP_N,
    sink: DiagnosticSink | None = None,
    clock: Clock | None = None,
) -> list[RankedItem]:
    """Score every item, drop the ones that could not be scored, sort by score desc.

    Ties are broken by ascending item_id so the order is stable across runs.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; choose one of {', '.join(STRATEGIES)}")
    p = parsePeriod(period)

    scored: list[tuple[float, int, dict]] = []
    skipped = 0
    for item in items:
        outcome = _scoreItem(item, p, strategy, sink, clock)
        if outcome is None:
            skipped += 1
            continue
        score, details = outcome
        scored.append((score, item.item_id, details))

    scored.sort(key=lambda s: (-s[0], s[1]))
    top = scored[: max(0, top_n)]
    logger.info(
        "Ranked %d items for %s (%s), %d skipped",
        len(top),
        periodName(p),
        strategy,
        skipped,
    )
    return [
        RankedItem(rank=i, item_id=item_id, score=score, details=details)
        for i, (score, item_id, details) in enumerate(top, 1)
    ]


def rankAllPeriods(
    items: Sequence[RankItem],
    strategy: Strategy = "full",
    top_n: int = DEFAULT_TOP_N,
    sink: DiagnosticSink | None = None,
    clock: Clock | None = None,
) -> dict[str, dict]:
    """Rank the same candidates for every period; one summary per period."""
    summary: dict[str, dict] = {}
    for period in PeriodType:
        name = periodName(period)
        try:
            ranked = rankItems(items, period, strategy, top_n, sink=sink, clock=clock)
        except ValueError as e:
            logger.exception("Ranking failed for %s", name)
            summary[name] = {"period": name, "success": False, "error": str(e)}
            continue
        summary[name] = {
            "period": name,
            "success": True,
            "count": len(ranked),
            "top_score": ranked[0].score if ranked else 0.0,
            "ranking": ranked,
        }
    return summary
