"""Application state container: singleton shared by the HTTP API and CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from trendscore.calculator import Clock, systemClock
from trendscore.config import TrendscoreConfig, loadConfig
from trendscore.diagnostics import DiagnosticSink, createSink

logger = logging.getLogger("trendscore")

DEFAULT_PORT = 7717

# ── Singleton ────────────────────────────────────────────────

_state: AppState | None = None


@dataclass(frozen=True)
class AppState:
    config: TrendscoreConfig
    sink: DiagnosticSink
    clock: Clock = field(default=systemClock)


def getState() -> AppState:
    """Return current state or raise if not initialised."""
    assert _state is not None, "AppState not initialized, call initState() first"
    return _state


def isInitialized() -> bool:
    return _state is not None


def initState(config: TrendscoreConfig | None = None) -> AppState:
    """Create + store singleton."""
    global _state
    _state = createAppState(config=config)
    return _state


def closeState() -> None:
    global _state
    _state = None
    logger.info("Trendscore shut down.")


def setState(s: AppState | None) -> None:
    """Inject state directly (for tests)."""
    global _state
    _state = s


def createAppState(
    config: TrendscoreConfig | None = None, clock: Clock | None = None
) -> AppState:
    """Create AppState: load config and build the diagnostic sink."""
    cfg = config or loadConfig()
    sink = createSink(cfg.diagnostics)
    logger.info("Trendscore starting (sink: %s, port: %d)", cfg.diagnostics.sink, cfg.port)
    return AppState(config=cfg, sink=sink, clock=clock or systemClock)
