"""Diagnostic sinks: null, logging, jsonl, memory."""

from trendscore.diagnostics.base import DiagnosticSink, preview, safeRecord
from trendscore.diagnostics.factory import createSink
from trendscore.diagnostics.sinks import JsonlSink, LoggingSink, MemorySink, NullSink

__all__ = [
    "DiagnosticSink",
    "JsonlSink",
    "LoggingSink",
    "MemorySink",
    "NullSink",
    "createSink",
    "preview",
    "safeRecord",
]
