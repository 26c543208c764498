"""Project Root Detector CLI — presentation layer.

Thin adapter: all resolution logic lives in ``prd.core``.
The CLI only maps user intents to engine calls and formats output.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich import print
from rich.console import Console
from rich.table import Table

from prd.core.batch import BatchEngine, TraversalOptions
from prd.core.errors import ManifestInvalid, ManifestNotFound, TraversalRootInvalid
from prd.core.logging import configure_logging
from prd.core.models import ResolutionResult
from prd.core.settings import Settings
from prd.manifest import load_cluster_manifest

app = typer.Typer(help="Project Root Detector — find the project root of every source file.")

_out = Console(highlight=False, soft_wrap=True)


# ── Callback (runs before every command) ────────────────────
@app.callback(invoke_without_command=True)
def _main_callback(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON."),
    table: bool = typer.Option(False, "--table", help="Output results as a table."),
    check: bool = typer.Option(False, "--check", help="Exit with code 1 if any file is excluded."),
    config_file: Path | None = typer.Option(None, "--config", help="YAML config manifest."),
    exclude: list[str] = typer.Option([], "--exclude", help="Extra exclusion name (repeatable)."),
    marker: list[str] = typer.Option([], "--marker", help="Extra marker name (repeatable)."),
    case_insensitive: bool = typer.Option(False, "--case-insensitive", help="Case-insensitive name matching."),
    workers: int | None = typer.Option(None, "--workers", "-w", help="Resolver threads.", envvar="PRD_WORKERS"),
    log_level: str = typer.Option("WARNING", "--log-level", envvar="PRD_LOG_LEVEL", help="Log level."),
    log_json: bool = typer.Option(False, "--log-json/--log-text", envvar="PRD_LOG_JSON", help="JSON or human logs."),
) -> None:
    """Configure logging + settings, then store in context for sub-commands."""
    configure_logging(level=log_level, json_output=log_json)

    overrides: dict[str, object] = {"log_level": log_level, "log_json": log_json}
    if config_file is not None:
        overrides["config_file"] = config_file
    if exclude:
        overrides["extra_exclusions"] = exclude
    if marker:
        overrides["extra_markers"] = marker
    if case_insensitive:
        overrides["case_insensitive"] = True
    if workers is not None:
        overrides["workers"] = workers

    try:
        settings = Settings(**overrides)  # type: ignore[arg-type]
        config = settings.to_config()
    except (ManifestNotFound, ManifestInvalid, ValidationError) as exc:
        print(f"[red]ERROR:[/red] invalid configuration: {exc}", file=sys.stderr)
        raise typer.Exit(code=2)

    ctx.ensure_object(dict)
    ctx.obj.update(
        settings=settings,
        engine=BatchEngine(config, workers=settings.workers),
        json=json_output,
        table=table,
        check=check,
    )

    # If no sub-command given, show help.
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _engine(ctx: typer.Context) -> BatchEngine:
    return ctx.obj["engine"]


# ── Output ──────────────────────────────────────────────────
def _emit_results(ctx: typer.Context, results: list[ResolutionResult]) -> None:
    if ctx.obj["json"]:
        typer.echo(json.dumps([r.to_dict() for r in results], indent=2))
    elif ctx.obj["table"]:
        t = Table(title="Project roots", show_lines=False)
        t.add_column("File", style="bold")
        t.add_column("Root")
        t.add_column("Case")
        for r in results:
            root = str(r.root) if r.root is not None else "[red](excluded)[/red]"
            t.add_row(str(r.file), root, r.case.value)
        _out.print(t)
    else:
        for r in results:
            target = str(r.root) if r.root is not None else "(excluded)"
            _out.print(f"{r.file} -> {target}", markup=False)

    if ctx.obj["check"] and any(r.excluded for r in results):
        raise typer.Exit(code=1)


def _read_stdin_paths() -> list[Path]:
    return [Path(line.strip()) for line in sys.stdin if line.strip()]


# ── Commands ────────────────────────────────────────────────
@app.command()
def traverse(
    ctx: typer.Context,
    directory: Path = typer.Argument(help="Directory to traverse."),
    extensions: str | None = typer.Option(
        None, "--extensions", "-e", help="Comma-separated extensions to include (e.g. rs,py,js)."
    ),
    max_depth: int | None = typer.Option(
        None, "--max-depth", "-d", min=0, help="Maximum traversal depth (0 = only the start directory)."
    ),
    roots_only: bool = typer.Option(False, "--roots-only", help="Only show unique project roots."),
    time_budget: float | None = typer.Option(
        None, "--time-budget", min=0, help="Stop discovering files after this many seconds."
    ),
) -> None:
    """Traverse a directory tree and detect project roots for all source files."""
    exts = frozenset(e.strip() for e in extensions.split(",") if e.strip()) if extensions else None
    options = TraversalOptions(max_depth=max_depth, extensions=exts, time_budget=time_budget)
    engine = _engine(ctx)

    try:
        if roots_only:
            roots = engine.discover_roots(directory, options)
        else:
            results = engine.traverse(directory, options)
    except TraversalRootInvalid as exc:
        print(f"[red]ERROR:[/red] {exc}", file=sys.stderr)
        raise typer.Exit(code=2)

    if roots_only:
        if ctx.obj["json"]:
            typer.echo(json.dumps({"roots": [str(r) for r in roots], "count": len(roots)}, indent=2))
        else:
            for root in roots:
                _out.print(str(root), markup=False)
        return

    _emit_results(ctx, list(results.values()))


@app.command()
def files(
    ctx: typer.Context,
    paths: list[Path] = typer.Argument(None, help="Source files to analyze."),
    batch: bool = typer.Option(False, "--batch", help="Read file paths from stdin (one per line)."),
    clusters: Path | None = typer.Option(None, "--clusters", help="YAML/JSON dependency-cluster manifest."),
) -> None:
    """Detect roots for explicit file paths."""
    inputs = _read_stdin_paths() if batch or not paths else list(paths)
    if not inputs:
        print("[red]ERROR:[/red] no files provided.", file=sys.stderr)
        raise typer.Exit(code=2)

    cluster_map = None
    if clusters is not None:
        s: Settings = ctx.obj["settings"]
        try:
            cluster_map = load_cluster_manifest(clusters, max_size_bytes=s.manifest_max_size_kb * 1024)
        except (ManifestNotFound, ManifestInvalid) as exc:
            print(f"[red]ERROR:[/red] {exc}", file=sys.stderr)
            raise typer.Exit(code=2)

    results = _engine(ctx).resolve_all(inputs, cluster_map)
    _emit_results(ctx, list(results.values()))


# ── Entrypoint ──────────────────────────────────────────────
def main() -> None:  # noqa: D103
    app()
