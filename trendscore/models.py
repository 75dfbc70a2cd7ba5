"""Pydantic models for analytics inputs, intermediate statistics, and score results."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# ── Inputs ───────────────────────────────────────────────────


class WindowMetrics(BaseModel):
    unique_users: int = Field(ge=0)
    total_views: int = Field(ge=0)


class TimeWindow(BaseModel):
    """One pre-aggregated bucket. Times are epoch milliseconds."""

    model_config = ConfigDict(frozen=True)

    start_time: int = Field(ge=0)
    end_time: int = Field(ge=0)
    metrics: WindowMetrics

    @property
    def total_views(self) -> int:
        return self.metrics.total_views

    @property
    def unique_users(self) -> int:
        return self.metrics.unique_users


class Event(BaseModel):
    """One raw activity record. Category arrives as `event_type` on the wire."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(ge=0)
    user_id: int
    engagement_score: float = Field(allow_inf_nan=False)
    category: str | None = Field(
        default=None, validation_alias=AliasChoices("event_type", "category")
    )


class DirectCounters(BaseModel):
    """Per-item deltas summarized by an external aggregation layer."""

    view_increase: int = Field(ge=0)
    unique_users: int = Field(ge=0)
    like_increase: int = Field(ge=0)
    bookmark_count: int = Field(ge=0)
    comment_increase: int = Field(ge=0)
    previous_increase_rate: float = Field(allow_inf_nan=False)
    current_increase_rate: float = Field(allow_inf_nan=False)
    total_views_all_time: int = Field(ge=0)
    total_unique_users_all_time: int = Field(ge=0)
    last_updated: int = Field(ge=0)


class ApproxCounters(BaseModel):
    """Counters whose unique-user figure comes from an approximate distinct counter."""

    unique_users: int = Field(ge=0)
    view_count: int = Field(ge=0)
    previous_view_count: int = Field(ge=0)
    view_count_per_hour: float = Field(allow_inf_nan=False)
    like_count: int = Field(ge=0)
    comment_count: int = Field(ge=0)
    bookmark_count: int = Field(ge=0)
    last_activity_time: int = Field(ge=0)


# ── Intermediate ─────────────────────────────────────────────


class IntermediateStats(BaseModel):
    total_views: int = 0
    unique_users: int = 0
    growth_rate: float = 0.0
    momentum: float = 0.0
    engagement: float = 0.0


class EventWeights(BaseModel):
    like_ratio: float = 0.0
    comment_ratio: float = 0.0
    bookmark_ratio: float = 0.0
    quality_factor: float = 0.0


# ── Results ──────────────────────────────────────────────────


class TrendStats(BaseModel):
    score: float
    growth_rate: float
    momentum: float
    engagement: float
    unique_users: int


class TrendingResult(BaseModel):
    score: float
    base_score: float
    time_decay: float
    momentum_factor: float
    diversity_factor: float


# ── Ranking ──────────────────────────────────────────────────


class RankItem(BaseModel):
    """One candidate for batch ranking; which inputs are used depends on the strategy."""

    item_id: int = Field(ge=0)
    windows: list[TimeWindow] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    direct: DirectCounters | None = None
    approx: ApproxCounters | None = None


class RankedItem(BaseModel):
    rank: int
    item_id: int
    score: float
    details: dict = Field(default_factory=dict)
