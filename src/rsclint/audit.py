from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from rsclint.config import RsclintConfig, compute_enabled_rule_ids
from rsclint.engine.detection import detect
from rsclint.engine.types import ScanSummary
from rsclint.rules.plugins import PluginLoadError, load_plugin_rules
from rsclint.rules.registry import rule_ids, set_extra_rules
from rsclint.scanner import (
    ScanTarget,
    build_file_contexts,
    build_project_context,
    discover_files,
    prepare_target,
    worker_count_from_env,
)

logger = logging.getLogger(__name__)

PathCallback = Callable[[Path], None]


@dataclass(frozen=True, slots=True)
class AuditResult:
    """Outcome of one `rsclint scan`: the resolved target, candidate files and summary."""

    target: ScanTarget
    files: tuple[Path, ...]
    summary: ScanSummary


@dataclass(frozen=True, slots=True)
class AuditCallbacks:
    # Progress hooks for the CLI; called from the calling thread only.
    on_context_built: PathCallback | None = None
    on_file_contexts_ready: Callable[[int], None] | None = None
    on_file_scanned: PathCallback | None = None


def audit_path(scan_path: Path, *, callbacks: AuditCallbacks | None = None) -> AuditResult:
    target = prepare_target(scan_path)
    return audit_files(target, files=discover_files(target), callbacks=callbacks)


def audit_files(
    target: ScanTarget,
    *,
    files: list[Path],
    callbacks: AuditCallbacks | None = None,
) -> AuditResult:
    """
    Parse and analyze `files` under `target`.

    Unreadable or malformed files become `FileError`s in the summary; the rest
    are analyzed. Plugin import failures are fatal and raise `RuntimeError`.
    """

    hooks = callbacks or AuditCallbacks()
    _register_plugins(target.config)

    project = build_project_context(target, files)
    workers = worker_count_from_env()
    contexts, errors = build_file_contexts(project, files, workers=workers, on_path_done=hooks.on_context_built)
    if hooks.on_file_contexts_ready is not None:
        hooks.on_file_contexts_ready(len(contexts))

    findings = detect(project, contexts, workers=workers, on_file_done=hooks.on_file_scanned)
    logger.debug("analyzed %d file(s): %d finding(s), %d error(s)", len(contexts), len(findings), len(errors))

    summary = ScanSummary(files_scanned=len(contexts), findings=tuple(findings), errors=tuple(errors))
    return AuditResult(target=target, files=tuple(files), summary=summary)


def _register_plugins(config: RsclintConfig) -> None:
    try:
        set_extra_rules(load_plugin_rules(config.plugins))
    except PluginLoadError as exc:
        raise RuntimeError(f"Failed to load rsclint plugins: {exc}") from exc

    known = rule_ids()
    for rule_id in sorted(set(config.rules.overrides) - known):
        logger.warning("unknown rule id in rules overrides: %s", rule_id)
    enabled = compute_enabled_rule_ids(config, available_rule_ids=known)
    logger.debug("enabled rules: %s", ", ".join(sorted(enabled)) or "<none>")
