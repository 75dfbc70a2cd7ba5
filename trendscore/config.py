"""Config loading from ~/.trendscore/config.json with env var overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path.home() / ".trendscore"
CONFIG_PATH = CONFIG_DIR / "config.json"


class DiagnosticsConfig(BaseModel):
    sink: str = "logging"  # null | logging | jsonl | memory
    jsonl_path: str = Field(default_factory=lambda: str(CONFIG_DIR / "diagnostics.jsonl"))
    preview_chars: int = 100


class RankingConfig(BaseModel):
    default_period: str = "daily"
    strategy: str = "full"  # full | direct | approx
    top_n: int = 1000


class TrendscoreConfig(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="TRENDSCORE_",
        env_nested_delimiter="__",
        extra="ignore",
    )
    log_level: str = "INFO"
    # HTTP server
    port: int = 7717
    # Sub-configs
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)


_FLAT_DIAGNOSTIC_KEYS = {
    "diagnostic_sink": "sink",
    "diagnostic_jsonl_path": "jsonl_path",
}


def _migrateFlatDiagnostics(raw: dict) -> dict:
    """Reshape legacy flat diagnostic_* keys into nested diagnostics: {...}."""
    if any(k in raw for k in _FLAT_DIAGNOSTIC_KEYS):
        nested = raw.setdefault("diagnostics", {})
        for old, new in _FLAT_DIAGNOSTIC_KEYS.items():
            if old in raw:
                nested.setdefault(new, raw.pop(old))
    return raw


def loadConfig() -> TrendscoreConfig:
    """Load config from ~/.trendscore/config.json with env var overrides."""
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        raw = _migrateFlatDiagnostics(raw)
        return TrendscoreConfig(**raw)
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = TrendscoreConfig()
    CONFIG_PATH.write_text(config.model_dump_json(indent=2))
    return config
