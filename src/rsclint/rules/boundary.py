from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rsclint.engine.context import ModuleContext
from rsclint.engine.types import Finding
from rsclint.rules.base import BaseRule, RuleMeta

HOOK_PREFIX = "use"


def is_client_hook(name: str) -> bool:
    """
    True for React-style hook names: `use` alone or followed by an uppercase
    letter (`useState`, `useEffect`), but not words like `user` or `usefulData`.
    """

    if not name.startswith(HOOK_PREFIX):
        return False
    rest = name[len(HOOK_PREFIX) :]
    return not rest or rest[0].isupper()


def callee_identifier(call: Any) -> Any | None:
    """The callee of a call expression when it is a bare identifier, else None."""

    callee = call.child_by_field_name("function")
    if callee is None or callee.type != "identifier":
        return None
    return callee


@dataclass(frozen=True, slots=True)
class ClientHookInServerComponent(BaseRule):
    meta = RuleMeta(
        rule_id="client-hook-in-server-component",
        title="Client hook in server component",
        description=(
            "Stateful/interactive hooks only run in the client runtime; calling one from a module "
            "without a leading 'use client' directive breaks at render time."
        ),
        category="boundary-violation",
        default_severity="error",
    )
    node_types = frozenset({"call_expression"})

    def on_node(self, node: Any, module: ModuleContext) -> list[Finding]:
        if not module.is_server:
            return []
        # Member calls (`React.useState()`) are not resolved.
        ident = callee_identifier(node)
        if ident is None:
            return []
        name = module.node_text(ident)
        if not is_client_hook(name):
            return []
        return [
            self._finding(
                module,
                node=ident,
                message=f"Client-side hook `{name}` called in a server component.",
                evidence=name,
                suggestion="Add a leading 'use client' directive or move the stateful logic into a client component.",
            )
        ]


def builtin_boundary_rules() -> list[BaseRule]:
    return [ClientHookInServerComponent()]
