"""Diagnostic sink protocol and the guarded call the engine uses."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger("trendscore")


@runtime_checkable
class DiagnosticSink(Protocol):
    """Interface all diagnostic sinks implement."""

    def record(self, item_id: int, action: str, message: str, payload: dict[str, Any]) -> None:
        """Receive one checkpoint from a calculation. Must not affect the result."""
        ...


def safeRecord(
    sink: DiagnosticSink | None,
    item_id: int,
    action: str,
    message: str,
    payload: dict[str, Any] | None = None,
) -> None:
    """Fire-and-forget: a failing sink is logged and ignored."""
    if sink is None:
        return
    try:
        sink.record(item_id, action, message, payload or {})
    except Exception:
        logger.debug("Diagnostic sink %r failed on %s", sink, action, exc_info=True)


def preview(text: str, limit: int = 100) -> str:
    """Truncate raw input for error payloads."""
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
