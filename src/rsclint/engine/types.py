from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Severity = Literal["info", "warn", "error"]
Category = Literal["boundary-violation", "optimization-opportunity"]
Scope = Literal["server", "client"]
LineMapping = Literal["approximate", "exact"]
FileErrorKind = Literal["read", "parse"]


@dataclass(frozen=True, slots=True)
class Finding:
    source_file: Path
    source_line: int  # 1-based
    category: Category
    rule_id: str
    message: str
    evidence: str
    severity: Severity = "warn"
    suggestion: str | None = None


@dataclass(frozen=True, slots=True)
class FileError:
    """A file that could not be analyzed. Never fatal to the rest of a scan."""

    path: Path
    kind: FileErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class ScanSummary:
    files_scanned: int
    findings: tuple[Finding, ...]
    errors: tuple[FileError, ...] = ()

    @property
    def boundary_violations(self) -> tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.category == "boundary-violation")

    @property
    def optimization_opportunities(self) -> tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.category == "optimization-opportunity")
