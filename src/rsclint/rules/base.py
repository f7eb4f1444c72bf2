from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, ClassVar

from rsclint.engine.context import ModuleContext
from rsclint.engine.types import Category, Finding, Severity
from rsclint.utils import line_for_node


@dataclass(frozen=True, slots=True)
class RuleMeta:
    rule_id: str
    title: str
    description: str
    category: Category
    default_severity: Severity


class BaseRule(ABC):
    """
    A detection rule plugged into the analysis engine.

    Rules subscribe to syntax node types via `node_types`; the engine calls
    `on_enter_module` once per module (after scope classification) and
    `on_node` for every subscribed node in pre-order. Rule instances are shared
    across files and threads, so they must not keep per-module state.
    """

    meta: ClassVar[RuleMeta]
    node_types: ClassVar[frozenset[str]] = frozenset()

    def on_enter_module(self, module: ModuleContext) -> list[Finding]:
        return []

    def on_node(self, node: Any, module: ModuleContext) -> list[Finding]:
        return []

    def _finding(
        self,
        module: ModuleContext,
        *,
        node: Any,
        message: str,
        evidence: str,
        suggestion: str | None = None,
    ) -> Finding:
        return Finding(
            source_file=module.path,
            source_line=line_for_node(node, mode=module.line_mapping),
            category=self.meta.category,
            rule_id=self.meta.rule_id,
            message=message,
            evidence=evidence,
            severity=self.meta.default_severity,
            suggestion=suggestion,
        )
