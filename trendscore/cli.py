"""Trendscore CLI: scoring, ranking, the HTTP server and config editing."""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, get_args, get_origin

import typer
from pydantic import BaseModel, TypeAdapter, ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from trendscore.config import DiagnosticsConfig, RankingConfig, TrendscoreConfig, loadConfig
from trendscore.diagnostics import MemorySink
from trendscore.models import RankItem
from trendscore.ranking import STRATEGIES
from trendscore.service import (
    svcPolicies,
    svcRank,
    svcScoreApprox,
    svcScoreDirect,
    svcScoreFull,
)
from trendscore.state import AppState, createAppState

logger = logging.getLogger("trendscore")

_RANK_ITEMS: TypeAdapter[list[RankItem]] = TypeAdapter(list[RankItem])

# ============================================================
# Shared helpers
# ============================================================


def _checkFormat(format: str) -> None:
    if format not in ("human", "json"):
        raise typer.BadParameter(f"Invalid format {format!r}; choose human or json")


def _readPayload(path: str | None, default: str = "[]") -> str:
    """Read a JSON payload from a file path or '-' for stdin."""
    if path is None:
        return default
    if path == "-":
        return sys.stdin.read()
    p = Path(path).expanduser()
    if not p.exists():
        raise typer.BadParameter(f"File not found: {path}")
    return p.read_text()


def _buildState(trace: bool) -> tuple[AppState, MemorySink | None]:
    cfg = loadConfig()
    logging.basicConfig(level=cfg.log_level.upper(), format="%(name)s | %(message)s")
    state = createAppState(cfg)
    if not trace:
        return state, None
    sink = MemorySink()
    return AppState(config=state.config, sink=sink, clock=state.clock), sink


def _printTrace(sink: MemorySink | None) -> None:
    if sink is None:
        return
    t = Table(title="Diagnostics", box=box.SIMPLE, show_lines=False)
    t.add_column("action", style="cyan")
    t.add_column("message")
    t.add_column("data", style="dim", overflow="fold")
    for r in sink.records:
        t.add_row(r.action, r.message, json.dumps(r.payload, default=str))
    _console.print(t)


def _emitResult(out: dict, format: str, sink: MemorySink | None) -> None:
    """Print a scoring envelope; exit 1 when the engine returned no result."""
    if format == "json":
        if sink is not None:
            out = {**out, "diagnostics": [asdict(r) for r in sink.records]}
        print(json.dumps(out, default=str))
    else:
        result = out.get("result")
        if result is None:
            _console.print(f"[red]No result:[/red] {out.get('error', 'unknown error')}")
        else:
            t = Table(
                title=f"item {out['item_id']} · {out['period']} · {out['strategy']}",
                show_header=False,
                box=box.SIMPLE,
                padding=(0, 1),
            )
            t.add_column("key", style="dim")
            t.add_column("val")
            for key, val in result.items():
                t.add_row(key, _fmtVal(val))
            _console.print(t)
        _printTrace(sink)
    if out.get("result") is None:
        raise typer.Exit(1)


# ============================================================
# Config CLI helpers
# ============================================================


def _fmtVal(v: Any) -> str:
    if v is None:
        return "[dim](not set)[/dim]"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        return f"{v:.6g}"
    return str(v)


def _annStr(ann: Any) -> str:
    """Return a simple string representation of a type annotation."""
    args = get_args(ann)
    if args:
        non_none = [a for a in args if a is not type(None)]
        has_none = type(None) in args
        base = non_none[0] if non_none else args[0]
        name = getattr(base, "__name__", str(base))
        return f"{name} | None" if has_none else name
    return getattr(ann, "__name__", str(ann))


def _unwrapModel(ann: Any) -> type[BaseModel] | None:
    """Extract a BaseModel subclass from Optional[X] / Union[X, None]."""
    if isinstance(ann, type) and issubclass(ann, BaseModel):
        return ann
    for arg in get_args(ann):
        if isinstance(arg, type) and issubclass(arg, BaseModel):
            return arg
    return None


def _getFieldAnnotation(dotpath: str) -> Any:
    """Walk model fields for dotpath, return annotation or None."""
    parts = dotpath.split(".")
    model: type[BaseModel] | None = TrendscoreConfig
    for part in parts[:-1]:
        f = model.model_fields.get(part)
        if f is None:
            return None
        model = _unwrapModel(f.annotation)
        if model is None:
            return None
    f = model.model_fields.get(parts[-1])
    return f.annotation if f else None


def _coerceTyped(value: str, annotation: Any) -> Any:
    """Coerce string value using the field annotation."""
    origin = get_origin(annotation)
    args = get_args(annotation) if origin else ()
    types = [a for a in args if a is not type(None)] if args else [annotation]
    base = types[0] if types else str

    if value.lower() in ("none", "null") and type(None) in (args or []):
        return None
    if base is bool:
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        raise ValueError(f"Expected bool, got {value!r}")
    if base is int:
        return int(value)
    if base is float:
        return float(value)
    return value


def _renderConfigSection(title: str, pairs: list[tuple[str, Any, Any]]) -> None:
    """Print a section with title + key/value table. pairs = (key, value, default)."""
    _console.print(f"\n[bold]{title}[/bold]")
    t = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
    t.add_column("key", style="dim")
    t.add_column("val")
    for key, val, default in pairs:
        fmt = _fmtVal(val)
        if val != default:
            fmt = f"[yellow]{fmt}[/yellow]"
        t.add_row(key, fmt)
    _console.print(t)


# ============================================================
# CLI (typer)
# ============================================================

_cli = typer.Typer(
    name="trendscore",
    help="Deterministic trending scores from windows, events, or summarized counters.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
_score_cli = typer.Typer(help="Score one item with a single strategy.")
_config_cli = typer.Typer(help="Read/write [bold]~/.trendscore/config.json[/bold].")
_cli.add_typer(_score_cli, name="score")
_cli.add_typer(_config_cli, name="config")

_console = Console()

_ITEM_ID = typer.Option(..., "--item-id", "-i", help="Item identifier (drives the jitter)")
_PERIOD = typer.Option(None, "--period", "-p", help="daily|weekly|monthly|yearly (or 0-3)")
_FORMAT = typer.Option("human", "--format", "-f", help="Output format: human|json")
_TRACE = typer.Option(False, "--trace", help="Show every diagnostic checkpoint")


@_score_cli.command("full")
def score_full(
    item_id: int = _ITEM_ID,
    windows: str | None = typer.Option(None, "--windows", "-w", help="Window JSON file or -"),
    events: str | None = typer.Option(None, "--events", "-e", help="Event JSON file or -"),
    period: str | None = _PERIOD,
    format: str = _FORMAT,
    trace: bool = _TRACE,
) -> None:
    """Full pipeline over time windows and raw events."""
    _checkFormat(format)
    if windows == "-" and events == "-":
        raise typer.BadParameter("Only one of --windows/--events can read stdin")
    state, sink = _buildState(trace)
    out = svcScoreFull(state, item_id, _readPayload(windows), _readPayload(events), period)
    _emitResult(out, format, sink)


@_score_cli.command("direct")
def score_direct(
    counters: str = typer.Argument(help="Direct counter JSON file or -"),
    item_id: int = _ITEM_ID,
    period: str | None = _PERIOD,
    format: str = _FORMAT,
    trace: bool = _TRACE,
) -> None:
    """Closed-form score from pre-summarized deltas."""
    _checkFormat(format)
    state, sink = _buildState(trace)
    out = svcScoreDirect(state, item_id, _readPayload(counters), period)
    _emitResult(out, format, sink)


@_score_cli.command("approx")
def score_approx(
    counters: str = typer.Argument(help="Approximate counter JSON file or -"),
    item_id: int = _ITEM_ID,
    period: str | None = _PERIOD,
    format: str = _FORMAT,
    trace: bool = _TRACE,
) -> None:
    """Score from approximate-distinct-count counters."""
    _checkFormat(format)
    state, sink = _buildState(trace)
    out = svcScoreApprox(state, item_id, _readPayload(counters), period)
    _emitResult(out, format, sink)


@_cli.command()
def rank(
    items: str = typer.Argument(help="JSON list of items ({item_id, windows, events, ...}) or -"),
    period: str | None = _PERIOD,
    strategy: str | None = typer.Option(None, "--strategy", "-s", help="full|direct|approx"),
    top_n: int | None = typer.Option(None, "--top", "-n", help="Keep the N best items"),
    format: str = _FORMAT,
) -> None:
    """Rank many items for one period."""
    _checkFormat(format)
    if strategy is not None and strategy not in STRATEGIES:
        raise typer.BadParameter(f"Invalid strategy {strategy!r}; choose full, direct or approx")
    try:
        candidates = _RANK_ITEMS.validate_json(_readPayload(items))
    except ValidationError as e:
        if format == "json":
            print(json.dumps({"ok": False, "error": str(e)}))
        else:
            _console.print(f"[red]Invalid items:[/red] {e}")
        raise typer.Exit(1) from e

    state, _ = _buildState(False)
    out = svcRank(state, candidates, period, strategy, top_n)
    if format == "json":
        print(json.dumps(out, default=str))
        return

    t = Table(title=f"{out['period']} · {out['strategy']}", box=box.SIMPLE)
    t.add_column("#", justify="right")
    t.add_column("item", justify="right")
    t.add_column("score", justify="right", style="bold")
    for r in out["ranking"]:
        t.add_row(str(r["rank"]), str(r["item_id"]), f"{r['score']:.2f}")
    _console.print(t)
    _console.print(f"[dim]{out['count']} of {out['candidates']} candidates ranked[/dim]")


@_cli.command()
def policies(format: str = _FORMAT) -> None:
    """Show the per-period constant table."""
    _checkFormat(format)
    data = svcPolicies()
    if format == "json":
        print(json.dumps(data))
        return
    t = Table(box=box.SIMPLE)
    for col in ("period", "lookback h", "compare h", "decay", "fresh decay", "mom w", "div w"):
        t.add_column(col)
    t.add_column("weights")
    for p in data["policies"]:
        t.add_row(
            p["period"],
            str(p["lookback_hours"]),
            str(p["compare_hours"]),
            _fmtVal(p["decay_rate"]),
            _fmtVal(p["freshness_decay_rate"]),
            _fmtVal(p["momentum_weight"]),
            _fmtVal(p["diversity_weight"]),
            ", ".join(_fmtVal(w) for w in p["weights"]),
        )
    _console.print(t)


@_cli.command()
def serve(
    port: int | None = typer.Option(None, "--port", help="Port (default from config)"),
    host: str = typer.Option("127.0.0.1", "--host"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from trendscore.server.app import createApp

    cfg = loadConfig()
    logging.basicConfig(level=cfg.log_level.upper(), format="%(name)s | %(message)s")
    uvicorn.run(createApp(), host=host, port=port or cfg.port)


@_config_cli.command("list")
def config_list(format: str = _FORMAT) -> None:
    """Pretty-print the current config grouped by section."""
    _checkFormat(format)
    cfg = loadConfig()

    if format == "json":
        print(json.dumps(cfg.model_dump()))
        raise typer.Exit()

    defaults = TrendscoreConfig()
    d = cfg.model_dump()
    dd = defaults.model_dump()
    _renderConfigSection("General", [(k, d[k], dd[k]) for k in ("log_level", "port")])

    def _subPairs(cfg_sub: Any, def_sub: Any, model: Any) -> list[tuple[str, Any, Any]]:
        return [(k, getattr(cfg_sub, k), getattr(def_sub, k)) for k in model.model_fields]

    _renderConfigSection(
        "Diagnostics", _subPairs(cfg.diagnostics, defaults.diagnostics, DiagnosticsConfig)
    )
    _renderConfigSection("Ranking", _subPairs(cfg.ranking, defaults.ranking, RankingConfig))


@_config_cli.command("get")
def config_get(
    dotpath: str = typer.Argument(help="Dot-separated key, e.g. ranking.top_n"),
    format: str = _FORMAT,
) -> None:
    """Get a single config value."""
    _checkFormat(format)
    node: Any = loadConfig().model_dump()
    for part in dotpath.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            if format == "json":
                print(json.dumps({"ok": False, "error": f"Key not found: {dotpath}"}))
            else:
                _console.print(f"[red]Key not found:[/red] {dotpath}")
            raise typer.Exit(1)
    ann = _getFieldAnnotation(dotpath)
    if format == "json":
        print(
            json.dumps({"key": dotpath, "value": node, "type": _annStr(ann) if ann else "unknown"})
        )
    else:
        type_hint = f"  [dim]({_annStr(ann)})[/dim]" if ann else ""
        _console.print(f"[bold]{dotpath}[/bold] = {_fmtVal(node)}{type_hint}")


@_config_cli.command("set")
def config_set(
    dotpath: str = typer.Argument(help="Dot-separated key path"),
    value: str = typer.Argument(help="Value (type-coerced via schema)"),
    format: str = _FORMAT,
) -> None:
    """Set a config value."""
    _checkFormat(format)
    from trendscore.config import CONFIG_PATH

    ann = _getFieldAnnotation(dotpath)
    try:
        coerced = _coerceTyped(value, ann) if ann else value
    except ValueError as e:
        if format == "json":
            print(json.dumps({"ok": False, "error": str(e)}))
        else:
            _console.print(f"[red]Invalid:[/red] {e}")
        raise typer.Exit(1) from e

    raw: dict = {}
    if CONFIG_PATH.exists():
        with contextlib.suppress(json.JSONDecodeError):
            raw = json.loads(CONFIG_PATH.read_text())

    parts = dotpath.split(".")
    node = raw
    for part in parts[:-1]:
        if part not in node or not isinstance(node[part], dict):
            node[part] = {}
        node = node[part]
    node[parts[-1]] = coerced

    try:
        TrendscoreConfig(**raw)
    except ValidationError as e:
        if format == "json":
            print(json.dumps({"ok": False, "error": str(e)}))
        else:
            _console.print(f"[red]Invalid value:[/red] {e}")
        raise typer.Exit(1) from e

    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(json.dumps(raw, indent=2) + "\n")
    if format == "json":
        print(json.dumps({"ok": True, "key": dotpath, "value": coerced}))
    else:
        _console.print(f"[green]Set[/green] {dotpath} = {coerced!r}")


def main() -> None:
    _cli()


if __name__ == "__main__":
    main()
