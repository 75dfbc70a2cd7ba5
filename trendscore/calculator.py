"""Per-item trend calculator: owns the window and event buffers and runs the strategies.

Nothing raised inside the engine crosses this boundary. Malformed payloads leave the
buffers untouched and make score calls return None; every checkpoint is reported to the
injected diagnostic sink.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from trendscore.diagnostics.base import DiagnosticSink, preview, safeRecord
from trendscore.errors import MalformedInputError
from trendscore.models import (
    ApproxCounters,
    DirectCounters,
    Event,
    TimeWindow,
    TrendingResult,
    TrendStats,
)
from trendscore.period import PeriodPolicy, PeriodType, parsePeriod, policyFor
from trendscore.scoring.strategies import scoreApprox, scoreDirect, scoreFullPipeline

Clock = Callable[[], int]
Payload = str | bytes | Sequence[Any] | dict[str, Any]

T = TypeVar("T")

_WINDOWS: TypeAdapter[list[TimeWindow]] = TypeAdapter(list[TimeWindow])
_EVENTS: TypeAdapter[list[Event]] = TypeAdapter(list[Event])
_DIRECT: TypeAdapter[DirectCounters] = TypeAdapter(DirectCounters)
_APPROX: TypeAdapter[ApproxCounters] = TypeAdapter(ApproxCounters)


def systemClock() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _rawText(payload: Payload) -> str:
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        return payload
    return repr(payload)


def decodePayload(adapter: TypeAdapter[T], payload: Payload, kind: str, limit: int = 100) -> T:
    """Validate JSON text/bytes or already-decoded data. Raises MalformedInputError."""
    try:
        if isinstance(payload, (str, bytes)):
            return adapter.validate_json(payload)
        return adapter.validate_python(payload)
    except ValidationError as e:
        raise MalformedInputError(kind, str(e), preview(_rawText(payload), limit)) from e


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump()


class TrendCalculator:
    """Scores one item for one period.

    `set*` calls replace a buffer wholesale. An instance is meant for single-writer,
    then-read use; separate instances share no state.
    """

    def __init__(
        self,
        item_id: int,
        period: PeriodType | int | str = PeriodType.DAILY,
        sink: DiagnosticSink | None = None,
        clock: Clock | None = None,
        preview_chars: int = 100,
    ):
        self._item_id = item_id
        self._period = parsePeriod(period)
        self._policy = policyFor(self._period)
        self._sink = sink
        self._clock = clock or systemClock
        self._preview_chars = preview_chars
        self._windows: tuple[TimeWindow, ...] = ()
        self._events: tuple[Event, ...] = ()
        self._emit(
            "init",
            "Trend calculator initialized",
            {"item_id": item_id, "period_type": int(self._period)},
        )

    # ── accessors ─────────────────────────────────────────────

    @property
    def item_id(self) -> int:
        return self._item_id

    @property
    def period(self) -> PeriodType:
        return self._period

    @property
    def policy(self) -> PeriodPolicy:
        return self._policy

    @property
    def windows(self) -> tuple[TimeWindow, ...]:
        return self._windows

    @property
    def events(self) -> tuple[Event, ...]:
        return self._events

    # ── helpers ───────────────────────────────────────────────

    def _emit(self, action: str, message: str, payload: dict[str, Any] | None = None) -> None:
        safeRecord(self._sink, self._item_id, action, message, payload)

    def _emitMalformed(self, message: str, err: MalformedInputError) -> None:
        self._emit("error", message, {"error": err.detail, "input_preview": err.preview})

    def _decode(self, adapter: TypeAdapter[T], payload: Payload, kind: str) -> T:
        return decodePayload(adapter, payload, kind, self._preview_chars)

    # ── buffers ───────────────────────────────────────────────

    def setWindows(self, payload: Payload) -> None:
        """Replace the window buffer. Malformed input keeps the previous buffer."""
        try:
            windows = self._decode(_WINDOWS, payload, "windows")
        except MalformedInputError as e:
            self._emitMalformed("Could not parse time window data", e)
            return
        self._emit(
            "set_windows",
            f"Time window data set ({len(windows)} windows)",
            {"count": len(windows), "sample": _dump(windows[0]) if windows else None},
        )
        self._windows = tuple(windows)

    def setEvents(self, payload: Payload) -> None:
        """Replace the event buffer. Malformed input keeps the previous buffer."""
        try:
            events = self._decode(_EVENTS, payload, "events")
        except MalformedInputError as e:
            self._emitMalformed("Could not parse event data", e)
            return
        self._emit(
            "set_events",
            f"Event data set ({len(events)} events)",
            {"count": len(events), "sample": _dump(events[0]) if events else None},
        )
        self._events = tuple(events)

    # ── scoring ───────────────────────────────────────────────

    def scoreFull(self) -> TrendStats | None:
        """Windows + events -> combined stats -> weighted score -> decay -> jitter."""
        now = self._clock()
        self._emit(
            "start",
            "Ranking score calculation started",
            {
                "period_type": int(self._period),
                "window_count": len(self._windows),
                "event_count": len(self._events),
            },
        )
        try:
            b = scoreFullPipeline(self._windows, self._events, self._policy, self._item_id, now)
        except (ArithmeticError, ValueError) as e:
            self._emit("error", "Full pipeline calculation failed", {"error": str(e)})
            return None

        self._emit(
            "base_stats",
            "Base statistics from time windows",
            b.window_stats.model_dump(exclude={"engagement"}),
        )
        self._emit(
            "recent_stats",
            "Statistics from recent events",
            b.event_stats.model_dump(include={"total_views", "unique_users", "engagement"}),
        )
        self._emit("event_distribution", "Event type distribution", _dump(b.weights))
        self._emit(
            "final_score",
            "Final score calculated",
            {
                "base_score": b.base_score,
                "time_decay": b.time_decay,
                "freshness_boost": b.freshness_boost,
                "time_decayed_score": b.time_decayed_score,
                "uniqueness_factor": b.uniqueness_factor,
                "final_score": b.result.score,
                "growth_rate": b.result.growth_rate,
                "momentum": b.result.momentum,
                "engagement": b.result.engagement,
            },
        )
        return b.result

    def scoreDirect(self, payload: Payload) -> TrendingResult | None:
        """Closed-form score from pre-summarized deltas; None on malformed input."""
        try:
            counters = self._decode(_DIRECT, payload, "direct counters")
        except MalformedInputError as e:
            self._emitMalformed("Could not parse direct calculation data", e)
            return None

        now = self._clock()
        self._emit("start", "Direct trending score calculation started", _dump(counters))
        try:
            result = scoreDirect(counters, self._policy, self._item_id, now)
        except (ArithmeticError, ValueError) as e:
            self._emit("error", "Direct calculation failed", {"error": str(e)})
            return None
        self._emit("result", "Direct trending score calculated", _dump(result))
        return result

    def scoreApprox(self, payload: Payload) -> TrendStats | None:
        """Score from approximate-distinct counters; None on malformed input."""
        try:
            counters = self._decode(_APPROX, payload, "approx counters")
        except MalformedInputError as e:
            self._emitMalformed("Could not parse approximate counter data", e)
            return None

        now = self._clock()
        try:
            b = scoreApprox(counters, self._policy, self._item_id, now)
        except (ArithmeticError, ValueError) as e:
            self._emit("error", "Approximate counter calculation failed", {"error": str(e)})
            return None
        self._emit(
            "hll_score",
            "Score calculated from approximate counters",
            {
                "view_count": counters.view_count,
                "unique_users": counters.unique_users,
                "like_count": counters.like_count,
                "comment_count": counters.comment_count,
                "bookmark_count": counters.bookmark_count,
                "base_score": b.base_score,
                "time_decay": b.time_decay,
                "uniqueness_factor": b.uniqueness_factor,
                "final_score": b.result.score,
            },
        )
        return b.result

    def testLog(self, message: str) -> None:
        """Emit a bare `test` checkpoint to verify sink wiring."""
        self._emit("test", message, {})
