from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated, Any

import click
import typer
from rich.console import Console
from rich.table import Table

from rsclint import __version__
from rsclint.audit import AuditCallbacks, AuditResult, audit_files
from rsclint.config import ConfigError, compute_enabled_rule_ids, validate_line_mapping
from rsclint.engine.types import LineMapping
from rsclint.logging_utils import configure_logging
from rsclint.reporters.json_reporter import render_json
from rsclint.reporters.terminal import render_terminal
from rsclint.rules.plugins import PluginLoadError, load_plugin_rules
from rsclint.rules.registry import all_rules, set_extra_rules
from rsclint.scanner import ScanTarget, discover_files, prepare_target

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="rsclint — React Server Component boundary analyzer.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("terminal", "json")

PathArgument = Annotated[
    Path,
    typer.Argument(exists=True, resolve_path=True, help="File or directory to analyze (default: current directory)."),
]
FormatOption = Annotated[str, typer.Option("--format", help="Output format: terminal, json.", show_default=True)]


@dataclass(frozen=True, slots=True)
class CliSettings:
    verbose: bool = False
    quiet: bool = False
    progress: bool = True


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Print the rsclint version."),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging on stderr.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors.")] = False,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Show parse/analyze progress bars.", show_default=True),
    ] = True,
) -> None:
    """rsclint CLI."""

    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = CliSettings(verbose=verbose, quiet=quiet, progress=progress)


def _settings() -> CliSettings:
    ctx = click.get_current_context(silent=True)
    obj = ctx.find_object(CliSettings) if ctx is not None else None
    return obj or CliSettings()


def _normalize_format(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"Unsupported format {value!r}. Use: {', '.join(OUTPUT_FORMATS)}.")
    return normalized


def _prepare(path: Path) -> ScanTarget:
    try:
        return prepare_target(path)
    except ConfigError as exc:
        err_console.print(f"Invalid configuration: {exc}")
        raise typer.Exit(code=2) from exc


def _with_line_mapping(target: ScanTarget, value: str | None) -> ScanTarget:
    if value is None:
        return target
    try:
        mapping: LineMapping = validate_line_mapping(value, field_name="--line-mapping")
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return replace(target, config=replace(target.config, line_mapping=mapping))


@contextmanager
def _progress_callbacks(total_files: int) -> Iterator[AuditCallbacks]:
    from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=err_console,
        transient=True,
    )
    parsing = progress.add_task("Parse", total=total_files)
    analyzing = progress.add_task("Analyze", total=1)
    with progress:
        yield AuditCallbacks(
            on_context_built=lambda _path: progress.advance(parsing, 1),
            on_file_contexts_ready=lambda total: progress.update(analyzing, total=total, completed=0),
            on_file_scanned=lambda _path: progress.advance(analyzing, 1),
        )


def _run_audit(target: ScanTarget, *, show_progress: bool) -> AuditResult:
    files = discover_files(target)
    logger.debug("discovered %d candidate file(s)", len(files))
    if not show_progress or not files:
        return audit_files(target, files=files)
    with _progress_callbacks(len(files)) as callbacks:
        return audit_files(target, files=files, callbacks=callbacks)


@app.command()
def scan(
    path: PathArgument = Path("."),
    output_format: FormatOption = "terminal",
    line_mapping: Annotated[
        str | None,
        typer.Option("--line-mapping", help="approximate (80-byte rows) or exact source lines (default: config)."),
    ] = None,
    fail_on_findings: Annotated[
        bool | None,
        typer.Option(
            "--fail-on-findings/--no-fail-on-findings",
            help="Exit 1 when an error-severity finding is reported (default: config).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Report boundary violations and data-fetching opportunities in JS/TS components."""

    fmt = _normalize_format(output_format)
    settings = _settings()
    target = _with_line_mapping(_prepare(path), line_mapping)

    try:
        result = _run_audit(target, show_progress=fmt == "terminal" and settings.progress and not settings.quiet)
    except RuntimeError as exc:
        err_console.print(str(exc))
        raise typer.Exit(code=2) from exc

    summary = result.summary
    if fmt == "json":
        typer.echo(render_json(summary, project_root=target.project_root))
    else:
        render_terminal(summary, project_root=target.project_root, scan_path=target.scan_path, console=console)

    if fail_on_findings is None:
        fail_on_findings = target.config.fail_on_findings
    if fail_on_findings and any(f.severity == "error" for f in summary.findings):
        raise typer.Exit(code=1)


def _rule_rows(target: ScanTarget, *, enabled_only: bool) -> list[dict[str, Any]]:
    available = all_rules()
    enabled_ids = compute_enabled_rule_ids(target.config, available_rule_ids={r.meta.rule_id for r in available})
    rows: list[dict[str, Any]] = []
    for rule in available:
        meta = rule.meta
        if enabled_only and meta.rule_id not in enabled_ids:
            continue
        rows.append(
            {
                "rule_id": meta.rule_id,
                "enabled": meta.rule_id in enabled_ids,
                "title": meta.title,
                "description": meta.description,
                "category": meta.category,
                "severity": target.config.severity_for(meta.rule_id) or meta.default_severity,
            }
        )
    return rows


@app.command()
def rules(
    path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=False,
            resolve_path=True,
            help="Project directory (default: current directory).",
        ),
    ] = Path("."),
    output_format: FormatOption = "terminal",
    enabled_only: Annotated[
        bool,
        typer.Option("--enabled-only", help="Hide rules the current config disables."),
    ] = False,
) -> None:
    """List built-in and plugin rules with their effective severity."""

    fmt = _normalize_format(output_format)
    target = _prepare(path)
    try:
        set_extra_rules(load_plugin_rules(target.config.plugins))
    except PluginLoadError as exc:
        err_console.print(f"Failed to load plugins: {exc}")
        raise typer.Exit(code=2) from exc

    rows = _rule_rows(target, enabled_only=enabled_only)
    if fmt == "json":
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return

    table = Table(title="rsclint rules")
    # IDs get pasted into config; they never wrap or truncate.
    id_width = max((len(row["rule_id"]) for row in rows), default=2)
    table.add_column("ID", style="bold", no_wrap=True, min_width=id_width)
    table.add_column("Enabled", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Category", overflow="fold")
    table.add_column("Title", overflow="fold")
    for row in rows:
        table.add_row(
            row["rule_id"],
            "yes" if row["enabled"] else "no",
            row["severity"],
            row["category"],
            row["title"],
        )
    console.print(table)
