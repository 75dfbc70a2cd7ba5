"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from trendscore.config import TrendscoreConfig
from trendscore.diagnostics import MemorySink
from trendscore.state import AppState

HOUR = 3_600_000
# 30 minutes into an hour bucket, so NOW - k * HOUR lands exactly k buckets back.
NOW = 1_700_001_000_000


def fixedClock() -> int:
    return NOW


def window(hours_ago: int, views: int, unique: int = 0) -> dict:
    start = NOW - hours_ago * HOUR
    return {
        "start_time": start,
        "end_time": start + HOUR - 1,
        "metrics": {"unique_users": unique, "total_views": views},
    }


def event(
    ms_ago: int, user_id: int = 1, score: float = 1.0, event_type: str | None = None
) -> dict:
    e: dict = {"timestamp": NOW - ms_ago, "user_id": user_id, "engagement_score": score}
    if event_type is not None:
        e["event_type"] = event_type
    return e


def directCounters(**overrides) -> dict:
    data = {
        "view_increase": 100,
        "unique_users": 40,
        "like_increase": 10,
        "bookmark_count": 5,
        "comment_increase": 2,
        "previous_increase_rate": 1.0,
        "current_increase_rate": 1.0,
        "total_views_all_time": 0,
        "total_unique_users_all_time": 0,
        "last_updated": NOW,
    }
    data.update(overrides)
    return data


def approxCounters(**overrides) -> dict:
    data = {
        "unique_users": 50,
        "view_count": 100,
        "previous_view_count": 0,
        "view_count_per_hour": 100.0,
        "like_count": 10,
        "comment_count": 5,
        "bookmark_count": 2,
        "last_activity_time": NOW,
    }
    data.update(overrides)
    return data


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def config() -> TrendscoreConfig:
    return TrendscoreConfig()


@pytest.fixture
def state(config: TrendscoreConfig, sink: MemorySink) -> AppState:
    return AppState(config=config, sink=sink, clock=fixedClock)


@pytest.fixture
def isolated_config(tmp_path: Path):
    """Redirect CONFIG_DIR / CONFIG_PATH to tmp_path."""
    cfg_dir = tmp_path / ".trendscore"
    cfg_dir.mkdir()
    cfg_path = cfg_dir / "config.json"
    with (
        patch("trendscore.config.CONFIG_DIR", cfg_dir),
        patch("trendscore.config.CONFIG_PATH", cfg_path),
    ):
        yield cfg_path
