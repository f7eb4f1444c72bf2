from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path

from rsclint.config import RsclintConfig, compute_enabled_rule_ids
from rsclint.engine.analysis import AnalysisEngine
from rsclint.engine.context import FileContext, ProjectContext
from rsclint.engine.types import Finding
from rsclint.rules.base import BaseRule
from rsclint.rules.registry import all_rules


def enabled_rules(config: RsclintConfig) -> list[BaseRule]:
    """Enabled rules, in registry order."""

    available = list(all_rules())
    enabled_ids = compute_enabled_rule_ids(config, available_rule_ids=(r.meta.rule_id for r in available))
    return [r for r in available if r.meta.rule_id in enabled_ids]


def detect(
    project: ProjectContext,
    files: Iterable[FileContext],
    *,
    workers: int | None = None,
    on_file_done: Callable[[Path], None] | None = None,
) -> list[Finding]:
    """
    Analyze every file context and concatenate the per-file findings.

    Files are independent, so they may be analyzed in parallel; results are
    merged in input order, which keeps output identical to a serial run.
    """

    config = project.config
    engine = AnalysisEngine(enabled_rules(config), line_mapping=config.line_mapping)

    def analyze(file_ctx: FileContext) -> list[Finding]:
        return _apply_overrides(config, engine.analyze(file_ctx))

    findings: list[Finding] = []
    file_list = list(files)
    effective_workers = workers or 1

    if effective_workers <= 1 or len(file_list) <= 1:
        for file_ctx in file_list:
            findings.extend(analyze(file_ctx))
            if on_file_done is not None:
                on_file_done(file_ctx.path)
        return findings

    max_workers = min(max(1, effective_workers), len(file_list))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for file_ctx, file_findings in zip(file_list, executor.map(analyze, file_list), strict=True):
            findings.extend(file_findings)
            if on_file_done is not None:
                on_file_done(file_ctx.path)

    return findings


def _apply_overrides(config: RsclintConfig, findings: list[Finding]) -> list[Finding]:
    adjusted: list[Finding] = []
    for finding in findings:
        severity = config.severity_for(finding.rule_id)
        adjusted.append(finding if severity is None else replace(finding, severity=severity))
    return adjusted
