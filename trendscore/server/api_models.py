"""Pydantic request models for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from trendscore.models import RankItem


class ScoreFullRequest(BaseModel):
    item_id: int = Field(ge=0)
    period: str | int | None = None
    windows: list[Any] = Field(default_factory=list)
    events: list[Any] = Field(default_factory=list)


class ScoreCountersRequest(BaseModel):
    """Counters are validated by the engine so a bad record yields a null result."""

    item_id: int = Field(ge=0)
    period: str | int | None = None
    counters: dict[str, Any]


class RankRequest(BaseModel):
    items: list[RankItem]
    period: str | int | None = None
    strategy: str | None = None
    top_n: int | None = Field(default=None, ge=0)
