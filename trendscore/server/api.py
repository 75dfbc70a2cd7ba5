"""FastAPI HTTP API: routes calling the shared service layer."""

from __future__ import annotations

from fastapi import APIRouter

from trendscore.server.api_models import RankRequest, ScoreCountersRequest, ScoreFullRequest
from trendscore.service import (
    svcPolicies,
    svcRank,
    svcScoreApprox,
    svcScoreDirect,
    svcScoreFull,
)
from trendscore.state import getState

router = APIRouter()


# ── Health ───────────────────────────────────────────────────


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/policies")
def api_policies():
    return svcPolicies()


# ── Scoring ──────────────────────────────────────────────────


@router.post("/score/full")
def api_score_full(req: ScoreFullRequest):
    return svcScoreFull(getState(), req.item_id, req.windows, req.events, req.period)


@router.post("/score/direct")
def api_score_direct(req: ScoreCountersRequest):
    return svcScoreDirect(getState(), req.item_id, req.counters, req.period)


@router.post("/score/approx")
def api_score_approx(req: ScoreCountersRequest):
    return svcScoreApprox(getState(), req.item_id, req.counters, req.period)


# ── Ranking ──────────────────────────────────────────────────


@router.post("/rank")
def api_rank(req: RankRequest):
    return svcRank(getState(), req.items, req.period, req.strategy, req.top_n)
