from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from rsclint.config import RsclintConfig
from rsclint.engine.types import LineMapping, Scope
from rsclint.suppressions import Suppressions


class SyntaxTree(Protocol):
    # tree-sitter Tree exposes `root_node`; we treat nodes structurally.
    root_node: Any


@dataclass(frozen=True, slots=True)
class ProjectContext:
    project_root: Path
    scan_path: Path
    files: tuple[Path, ...]
    config: RsclintConfig


@dataclass(frozen=True, slots=True)
class FileContext:
    project_root: Path
    path: Path
    relative_path: str
    language: str
    text: str
    suppressions: Suppressions
    syntax_tree: SyntaxTree
    tree_sitter_language: str

    @property
    def source(self) -> bytes:
        # tree-sitter offsets are UTF-8 byte offsets.
        return self.text.encode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class ModuleContext:
    """
    Per-module traversal state handed to every rule callback.

    Created fresh for each analyzed module; `scope` is decided once from the
    leading directive before any node is dispatched and never changes.
    """

    path: Path
    source: bytes
    scope: Scope
    line_mapping: LineMapping = "approximate"

    @property
    def is_client(self) -> bool:
        return self.scope == "client"

    @property
    def is_server(self) -> bool:
        return self.scope == "server"

    def node_text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
