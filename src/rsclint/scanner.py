from __future__ import annotations

import logging
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from rsclint.config import CONFIG_FILENAME, RsclintConfig, load_config, path_is_ignored
from rsclint.engine.context import FileContext, ProjectContext
from rsclint.engine.tree_sitter import TreeSitterError, first_syntax_error
from rsclint.engine.tree_sitter import parse as ts_parse
from rsclint.engine.types import FileError, FileErrorKind
from rsclint.languages.registry import (
    allowed_extensions,
    detect_language,
    tree_sitter_language_for_path,
)
from rsclint.suppressions import parse_suppressions
from rsclint.utils import safe_relpath, source_line

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".next",
    ".turbo",
    ".vercel",
    "node_modules",
    "dist",
    "build",
    "out",
    "coverage",
}

PROJECT_MARKERS = ("pyproject.toml", CONFIG_FILENAME, "package.json")

RSCLINT_WORKERS_ENV = "RSCLINT_WORKERS"
DEFAULT_MAX_WORKERS = 32


class SourceError(Exception):
    """A file could not be turned into an analyzable syntax tree."""

    kind: FileErrorKind = "read"

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message

    def to_file_error(self) -> FileError:
        return FileError(path=self.path, kind=self.kind, message=self.message)


class ReadFailure(SourceError):
    kind: FileErrorKind = "read"


class ParseFailure(SourceError):
    kind: FileErrorKind = "parse"


@dataclass(frozen=True, slots=True)
class ScanTarget:
    project_root: Path
    scan_path: Path
    config: RsclintConfig


def resolve_worker_count(
    raw_value: str | None,
    *,
    default: int | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> int:
    """
    Worker count from an `RSCLINT_WORKERS`-style value.

    A positive integer is used as given; anything else (unset, empty, `auto`,
    zero, negative, garbage) means twice the CPU count. Always clamped to
    `1..max_workers`.
    """

    requested = 0
    if raw_value is not None and raw_value.strip().isdigit():
        requested = int(raw_value.strip())
    if requested <= 0:
        requested = default if default is not None else 2 * (os.cpu_count() or 1)
    return max(1, min(requested, max_workers))


def worker_count_from_env(*, default: int | None = None) -> int:
    return resolve_worker_count(os.environ.get(RSCLINT_WORKERS_ENV), default=default)


def prepare_target(scan_path: Path) -> ScanTarget:
    """
    Resolve project root and load configuration.

    The project root is the closest directory (starting at `scan_path`)
    holding a `pyproject.toml`, `.rsclint.toml` or `package.json`; otherwise
    the scanned directory (or the file's parent).
    """

    scan_path = scan_path.resolve()
    project_root = _detect_project_root(scan_path)
    config = load_config(project_root)
    return ScanTarget(project_root=project_root, scan_path=scan_path, config=config)


def discover_files(target: ScanTarget) -> list[Path]:
    """Analyzable source files under the scan path, sorted, minus skipped dirs and ignored paths."""

    suffixes = allowed_extensions(target.config.languages)

    def wanted(path: Path) -> bool:
        return path.suffix.lower() in suffixes and not path_is_ignored(
            path,
            project_root=target.project_root,
            ignore_patterns=target.config.ignore.paths,
        )

    if target.scan_path.is_file():
        return [target.scan_path] if wanted(target.scan_path) else []

    found: set[Path] = set()
    for dirpath, dirnames, filenames in os.walk(target.scan_path):
        # Pruning in place stops os.walk from descending.
        dirnames[:] = [name for name in dirnames if name not in DEFAULT_SKIP_DIRS]
        found.update(path for path in (Path(dirpath, name) for name in filenames) if wanted(path))
    return sorted(found)


def build_project_context(target: ScanTarget, files: list[Path]) -> ProjectContext:
    return ProjectContext(
        project_root=target.project_root,
        scan_path=target.scan_path,
        files=tuple(files),
        config=target.config,
    )


def build_file_context(project: ProjectContext, path: Path) -> FileContext:
    """
    Read and parse one file.

    Raises `ReadFailure` when the file cannot be read and `ParseFailure` when
    it is not syntactically valid; a malformed tree is never returned.
    """

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ReadFailure(path, f"Failed to read file: {exc}") from exc

    return build_file_context_from_text(project, path, text)


def build_file_context_from_text(project: ProjectContext, path: Path, text: str) -> FileContext:
    language = detect_language(path)
    if language is None:
        raise ParseFailure(path, f"unsupported file extension: {path.suffix or '<none>'}")

    tree_sitter_language = tree_sitter_language_for_path(path, detected_language=language)
    try:
        syntax_tree = ts_parse(tree_sitter_language, text)
    except TreeSitterError as exc:
        raise ParseFailure(path, str(exc)) from exc

    error_node = first_syntax_error(syntax_tree.root_node)
    if error_node is not None:
        raise ParseFailure(path, f"Failed to parse: syntax error at line {source_line(error_node)}")

    return FileContext(
        project_root=project.project_root,
        path=path,
        relative_path=safe_relpath(path, project.project_root),
        language=language,
        text=text,
        suppressions=parse_suppressions(text.splitlines()),
        syntax_tree=syntax_tree,
        tree_sitter_language=tree_sitter_language,
    )


def build_file_contexts(
    project: ProjectContext,
    paths: list[Path],
    *,
    workers: int = 1,
    on_path_done: Callable[[Path], None] | None = None,
) -> tuple[list[FileContext], list[FileError]]:
    """
    Build FileContext objects for paths, optionally in parallel.

    Ordering is deterministic: returned contexts and errors follow the input
    `paths` order. A file that fails to read or parse is recorded as a
    `FileError` and does not affect the others.
    """

    contexts: list[FileContext] = []
    errors: list[FileError] = []

    def collect(path: Path, result: FileContext | FileError) -> None:
        if on_path_done is not None:
            on_path_done(path)
        if isinstance(result, FileError):
            logger.warning("skipping %s: %s", result.path, result.message)
            errors.append(result)
        else:
            contexts.append(result)

    build_one = partial(_build_or_error, project)
    if workers <= 1 or len(paths) <= 1:
        for path in paths:
            collect(path, build_one(path))
        return contexts, errors

    max_workers = min(max(1, workers), len(paths))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for path, result in zip(paths, executor.map(build_one, paths), strict=True):
            collect(path, result)
    return contexts, errors


def _build_or_error(project: ProjectContext, path: Path) -> FileContext | FileError:
    try:
        return build_file_context(project, path)
    except SourceError as exc:
        return exc.to_file_error()


def _detect_project_root(start: Path) -> Path:
    base = start if start.is_dir() else start.parent
    for candidate in [base, *base.parents]:
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate
    return base
