from __future__ import annotations

from pathlib import Path

from rsclint.engine.analysis import AnalysisEngine
from rsclint.engine.context import FileContext, ProjectContext
from rsclint.engine.types import Finding, LineMapping
from rsclint.rules.registry import builtin_rules
from rsclint.scanner import build_file_context


class FakeNode:
    """Minimal stand-in for a tree-sitter node."""

    def __init__(
        self,
        node_type: str,
        *,
        children: list[FakeNode] | None = None,
        start_byte: int = 0,
        end_byte: int = 0,
        start_point: tuple[int, int] = (0, 0),
        fields: dict[str, FakeNode] | None = None,
        named: bool = True,
    ) -> None:
        self.type = node_type
        self.children = children or []
        self.start_byte = start_byte
        self.end_byte = end_byte
        self.start_point = start_point
        self.is_named = named
        self.has_error = False
        self.is_missing = False
        self._fields = fields or {}

    @property
    def named_children(self) -> list[FakeNode]:
        return [c for c in self.children if c.is_named]

    def child_by_field_name(self, name: str) -> FakeNode | None:
        return self._fields.get(name)


class FakeTree:
    def __init__(self, root_node: FakeNode) -> None:
        self.root_node = root_node


class FakeSource:
    """Builds fake nodes whose offsets point at snippets of `text`."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.raw = text.encode("utf-8")

    def node(self, node_type: str, snippet: str, *children: FakeNode, after: int = 0, **kwargs) -> FakeNode:
        start = self.raw.index(snippet.encode("utf-8"), after)
        end = start + len(snippet.encode("utf-8"))
        row = self.raw[:start].count(b"\n")
        col = start - (self.raw.rfind(b"\n", 0, start) + 1)
        return FakeNode(
            node_type,
            children=list(children),
            start_byte=start,
            end_byte=end,
            start_point=(row, col),
            **kwargs,
        )

    def call(self, name: str, *arguments: FakeNode, after: int = 0) -> FakeNode:
        start = self.raw.index(name.encode("utf-8"), after)
        ident = self.node("identifier", name, after=start)
        args = FakeNode("arguments", children=list(arguments), start_byte=ident.end_byte, end_byte=ident.end_byte)
        call = FakeNode(
            "call_expression",
            children=[ident, args],
            start_byte=ident.start_byte,
            end_byte=ident.end_byte,
            start_point=ident.start_point,
            fields={"function": ident, "arguments": args},
        )
        return call

    def directive(self, value: str = "use client") -> FakeNode:
        literal = f'"{value}"'
        string = self.node("string", literal)
        return self.node("expression_statement", literal, string)

    def program(self, *statements: FakeNode) -> FakeNode:
        return FakeNode("program", children=list(statements), end_byte=len(self.raw))


def write_source(root: Path, relpath: str, content: str) -> Path:
    path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def make_file_ctx(project_ctx: ProjectContext, *, relpath: str, content: str) -> FileContext:
    path = write_source(project_ctx.project_root, relpath, content)
    return build_file_context(project_ctx, path)


def analyze_source(
    project_ctx: ProjectContext,
    content: str,
    *,
    relpath: str = "app/page.tsx",
    line_mapping: LineMapping = "approximate",
) -> list[Finding]:
    ctx = make_file_ctx(project_ctx, relpath=relpath, content=content)
    return AnalysisEngine(builtin_rules(), line_mapping=line_mapping).analyze(ctx)
