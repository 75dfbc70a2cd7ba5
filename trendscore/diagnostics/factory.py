"""Diagnostic sink factory."""

from __future__ import annotations

import logging

from trendscore.config import DiagnosticsConfig
from trendscore.diagnostics.base import DiagnosticSink
from trendscore.diagnostics.sinks import JsonlSink, LoggingSink, MemorySink, NullSink

logger = logging.getLogger(__name__)


def createSink(config: DiagnosticsConfig) -> DiagnosticSink:
    """Create a sink from config. Unknown names fall back to logging."""
    kind = config.sink.lower()

    if kind == "null":
        return NullSink()
    elif kind == "jsonl":
        sink = JsonlSink(config.jsonl_path)
        logger.info("Writing diagnostics to %s", sink.path)
        return sink
    elif kind == "memory":
        return MemorySink()
    elif kind != "logging":
        logger.info("Unknown diagnostic sink %r, using logging", config.sink)
    return LoggingSink()
