from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from rsclint.engine.context import FileContext, ModuleContext, SyntaxTree
from rsclint.engine.scope import classify
from rsclint.engine.types import Finding, LineMapping
from rsclint.engine.walker import iter_preorder
from rsclint.rules.base import BaseRule
from rsclint.suppressions import Suppressions
from rsclint.utils import source_line

logger = logging.getLogger(__name__)


class FindingCollector:
    """Accumulates findings in discovery order for one module."""

    def __init__(self) -> None:
        self._findings: list[Finding] = []
        self._finalized = False

    def add(self, findings: Iterable[Finding]) -> None:
        if self._finalized:
            raise RuntimeError("FindingCollector is finalized")
        self._findings.extend(findings)

    def __len__(self) -> int:
        return len(self._findings)

    def finalize(self) -> tuple[Finding, ...]:
        self._finalized = True
        return tuple(self._findings)


class AnalysisEngine:
    """
    Runs a fixed, ordered set of rules over one module at a time.

    The engine holds no per-module state: every `analyze` call classifies the
    module, builds a fresh `ModuleContext` and `FindingCollector`, and walks the
    tree once. One engine can therefore be shared by worker threads.
    """

    def __init__(self, rules: Sequence[BaseRule], *, line_mapping: LineMapping = "approximate") -> None:
        self.rules = tuple(rules)
        self.line_mapping = line_mapping
        dispatch: dict[str, list[BaseRule]] = {}
        for rule in self.rules:
            for node_type in rule.node_types:
                dispatch.setdefault(node_type, []).append(rule)
        self._dispatch = {node_type: tuple(rules) for node_type, rules in dispatch.items()}

    def analyze(self, ctx: FileContext) -> list[Finding]:
        return self.analyze_tree(
            ctx.syntax_tree,
            path=ctx.path,
            source=ctx.source,
            suppressions=ctx.suppressions,
        )

    def analyze_tree(
        self,
        tree: SyntaxTree,
        *,
        path: Path,
        source: bytes,
        suppressions: Suppressions | None = None,
    ) -> list[Finding]:
        root = tree.root_node
        module = ModuleContext(
            path=path,
            source=source,
            scope=classify(root, source),
            line_mapping=self.line_mapping,
        )
        logger.debug("%s: %s component", path, module.scope)

        collector = FindingCollector()
        for rule in self.rules:
            collector.add(_unsuppressed(rule.on_enter_module(module), suppressions, line=None))

        if self._dispatch:
            for node in iter_preorder(root):
                rules = self._dispatch.get(node.type)
                if not rules:
                    continue
                for rule in rules:
                    found = rule.on_node(node, module)
                    if found:
                        collector.add(_unsuppressed(found, suppressions, line=_real_line(node)))

        return list(collector.finalize())


def _real_line(node: Any) -> int | None:
    try:
        return source_line(node)
    except (AttributeError, IndexError, TypeError):
        return None


def _unsuppressed(findings: Iterable[Finding], suppressions: Suppressions | None, *, line: int | None) -> list[Finding]:
    if suppressions is None:
        return list(findings)
    return [f for f in findings if not suppressions.is_suppressed(f.rule_id, line=line)]
