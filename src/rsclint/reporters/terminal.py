from __future__ import annotations

from collections import defaultdict
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from rsclint import __version__
from rsclint.engine.types import Category, FileError, Finding, ScanSummary
from rsclint.utils import safe_relpath

_SEVERITY_ICON = {"error": "✖", "warn": "⚠", "info": "ℹ"}
_SEVERITY_STYLE = {"error": "bold red", "warn": "yellow", "info": "cyan"}
_CATEGORY_HEADING: dict[Category, tuple[str, str]] = {
    "boundary-violation": ("Server Component Issue Found!", "bold red"),
    "optimization-opportunity": ("Optimization Opportunity", "bold cyan"),
}


def render_terminal(
    summary: ScanSummary,
    *,
    project_root: Path,
    scan_path: Path | None = None,
    console: Console,
) -> None:
    header = Text()
    header.append("rsclint ", style="bold")
    header.append(f"v{__version__}", style="dim")
    header.append(" — analyzing components in ", style="dim")
    header.append(safe_relpath(scan_path or project_root, project_root), style="cyan")

    console.print(Panel(header, subtitle=f"Scanned {summary.files_scanned} files", border_style="cyan"))

    by_file: dict[str, list[Finding]] = defaultdict(list)
    for finding in summary.findings:
        by_file[safe_relpath(finding.source_file, project_root)].append(finding)

    for file_path in sorted(by_file):
        _print_file(console, file_path, by_file[file_path])

    if summary.errors:
        _print_errors(console, summary.errors, project_root=project_root)

    if not summary.boundary_violations:
        console.print(Text("✅ No server component issues found!", style="bold green"))
    _print_summary(summary, console=console)


def _print_file(console: Console, file_path: str, findings: list[Finding]) -> None:
    # Findings keep their traversal order inside each category.
    for category, (heading, style) in _CATEGORY_HEADING.items():
        in_category = [f for f in findings if f.category == category]
        if not in_category:
            continue
        console.print(Text(f"{_SEVERITY_ICON['warn']}  {heading}", style=style))
        console.print(f"   File: {file_path}")
        for finding in in_category:
            _print_finding(console, finding)
        console.print()


def _print_finding(console: Console, finding: Finding) -> None:
    icon = _SEVERITY_ICON.get(finding.severity, "•")
    style = _SEVERITY_STYLE.get(finding.severity, "")

    line = Text()
    line.append(f"   {icon} ", style=style)
    line.append(finding.evidence, style="yellow")
    line.append(f" on line {finding.source_line}")
    line.append(f"  {finding.message}", style="dim")
    line.append(f"  [{finding.rule_id}]", style="dim")
    console.print(line)

    if finding.suggestion:
        console.print(f"     → {finding.suggestion}", style="dim")


def _print_errors(console: Console, errors: tuple[FileError, ...], *, project_root: Path) -> None:
    console.print(Text("Files not analyzed", style="bold"))
    for error in errors:
        console.print(f"   Error analyzing {safe_relpath(error.path, project_root)}: {error.message}", style="red")
    console.print()


def _print_summary(summary: ScanSummary, *, console: Console) -> None:
    console.print(Text("─" * 60, style="dim"))
    console.print(
        Text(
            f"Boundary violations: {len(summary.boundary_violations)}  "
            f"Optimization opportunities: {len(summary.optimization_opportunities)}  "
            f"Errors: {len(summary.errors)}",
            style="bold",
        )
    )
    console.print(Text("─" * 60, style="dim"))
