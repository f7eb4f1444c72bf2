from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rsclint.engine.context import ModuleContext
from rsclint.engine.types import Finding
from rsclint.rules.base import BaseRule, RuleMeta
from rsclint.rules.boundary import callee_identifier

MOVABLE_FETCH_MESSAGE = "data fetching could be moved to a server-evaluated scope"
MOVABLE_FETCH_EVIDENCE = "await expression in client component"

AWAIT_KEYWORD = "await"


def await_keyword_callee(call: Any, module: ModuleContext) -> Any | None:
    """
    The `await` keyword of an await the grammar parsed as a call.

    The JavaScript grammar reads `await (expr).member()` as a call whose callee
    is an identifier spelled `await`. `await` is reserved in modules and async
    bodies, so such a callee is always an await expression.
    """

    ident = callee_identifier(call)
    if ident is None or module.node_text(ident) != AWAIT_KEYWORD:
        return None
    return ident


@dataclass(frozen=True, slots=True)
class MovableDataFetch(BaseRule):
    meta = RuleMeta(
        rule_id="movable-data-fetch",
        title="Data fetch in client component",
        description=(
            "Awaited work in a client module usually fetches data that a server component could "
            "load and pass down, saving a client round trip and its loading state."
        ),
        category="optimization-opportunity",
        default_severity="info",
    )
    node_types = frozenset({"await_expression", "call_expression"})

    def on_node(self, node: Any, module: ModuleContext) -> list[Finding]:
        # Heuristic: every await in client scope qualifies, whatever is awaited.
        if not module.is_client:
            return []
        anchor = node
        if node.type == "call_expression":
            anchor = await_keyword_callee(node, module)
            if anchor is None:
                return []
        return [
            self._finding(
                module,
                node=anchor,
                message=MOVABLE_FETCH_MESSAGE,
                evidence=MOVABLE_FETCH_EVIDENCE,
                suggestion="Fetch in a parent server component and pass the result down as props.",
            )
        ]


def builtin_optimization_rules() -> list[BaseRule]:
    return [MovableDataFetch()]
