"""Built-in diagnostic sinks: null, logging, JSON lines file, in-memory."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger("trendscore")


class NullSink:
    def record(self, item_id: int, action: str, message: str, payload: dict[str, Any]) -> None:
        return None


class LoggingSink:
    """Forward checkpoints to the trendscore logger. Errors go out at WARNING."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def record(self, item_id: int, action: str, message: str, payload: dict[str, Any]) -> None:
        level = logging.WARNING if action == "error" else logging.DEBUG
        if not self._log.isEnabledFor(level):
            return
        self._log.log(
            level, "[%d] %s: %s %s", item_id, action, message, json.dumps(payload, default=str)
        )


class JsonlSink:
    """Append one JSON object per checkpoint to a file."""

    def __init__(self, path: str):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def record(self, item_id: int, action: str, message: str, payload: dict[str, Any]) -> None:
        line = json.dumps(
            {
                "ts": int(time.time() * 1000),
                "item_id": item_id,
                "action": action,
                "message": message,
                "data": payload,
            },
            default=str,
        )
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")


@dataclass
class DiagnosticRecord:
    item_id: int
    action: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)


class MemorySink:
    """Keep checkpoints in a list; used for tracing and tests."""

    def __init__(self) -> None:
        self.records: list[DiagnosticRecord] = []

    def record(self, item_id: int, action: str, message: str, payload: dict[str, Any]) -> None:
        self.records.append(DiagnosticRecord(item_id, action, message, dict(payload)))

    def actions(self) -> list[str]:
        return [r.action for r in self.records]

    def byAction(self, action: str) -> list[DiagnosticRecord]:
        return [r for r in self.records if r.action == action]

    def clear(self) -> None:
        self.records.clear()
