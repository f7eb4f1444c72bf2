from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rsclint import __version__
from rsclint.engine.types import FileError, Finding, ScanSummary
from rsclint.utils import safe_relpath

REPORT_SCHEMA_VERSION = 1


def render_json(summary: ScanSummary, *, project_root: Path) -> str:
    payload = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "tool": {"name": "rsclint", "version": __version__},
        "files_scanned": summary.files_scanned,
        "counts": {
            "boundary-violation": len(summary.boundary_violations),
            "optimization-opportunity": len(summary.optimization_opportunities),
            "errors": len(summary.errors),
        },
        "findings": [finding_to_dict(f, project_root=project_root) for f in summary.findings],
        "errors": [_error_to_dict(e, project_root=project_root) for e in summary.errors],
    }
    return json.dumps(payload, indent=2, sort_keys=False)


def finding_to_dict(finding: Finding, *, project_root: Path) -> dict[str, Any]:
    return {
        "source_file": safe_relpath(finding.source_file, project_root),
        "source_line": finding.source_line,
        "category": finding.category,
        "rule_id": finding.rule_id,
        "severity": finding.severity,
        "message": finding.message,
        "evidence": finding.evidence,
        "suggestion": finding.suggestion,
    }


def _error_to_dict(error: FileError, *, project_root: Path) -> dict[str, Any]:
    return {
        "path": safe_relpath(error.path, project_root),
        "kind": error.kind,
        "message": error.message,
    }
