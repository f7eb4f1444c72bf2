from __future__ import annotations

from pathlib import Path
from typing import Any

from rsclint.engine.types import LineMapping

# Fixed-width line estimate used by earlier releases of this tool. Reports keep
# using it by default so line numbers stay comparable across versions.
APPROXIMATE_LINE_WIDTH = 80


def approximate_line(offset: int) -> int:
    return 1 + max(offset, 0) // APPROXIMATE_LINE_WIDTH


def source_line(node: Any) -> int:
    """Real 1-based line of a node's first byte."""

    row = node.start_point[0]
    return int(row) + 1


def line_for_node(node: Any, *, mode: LineMapping) -> int:
    if mode == "exact":
        return source_line(node)
    return approximate_line(int(node.start_byte))


def safe_relpath(path: Path, root: Path) -> str:
    """
    Return a stable, POSIX-style path for reporting output.

    Prefer a path relative to `root`; fall back to `path.as_posix()` when the
    path is outside the root or cannot be resolved.
    """

    try:
        resolved_path = path.resolve()
        resolved_root = root.resolve()
    except OSError:
        return path.as_posix()

    try:
        return resolved_path.relative_to(resolved_root).as_posix()
    except ValueError:
        return path.as_posix()
