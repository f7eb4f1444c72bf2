from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rsclint.engine.context import ModuleContext
from rsclint.engine.scope import string_value
from rsclint.engine.types import Finding
from rsclint.rules.base import BaseRule, RuleMeta

BROWSER_GLOBALS = frozenset({"window", "document", "localStorage", "sessionStorage", "navigator"})


@dataclass(frozen=True, slots=True)
class ServerOnlyImportInClient(BaseRule):
    meta = RuleMeta(
        rule_id="server-only-import-in-client",
        title="server-only import in client component",
        description="Detects `import 'server-only'` inside a module marked with 'use client'.",
        category="boundary-violation",
        default_severity="error",
    )
    node_types = frozenset({"import_statement"})

    def on_node(self, node: Any, module: ModuleContext) -> list[Finding]:
        if not module.is_client:
            return []
        source = node.child_by_field_name("source")
        if source is None or string_value(source, module.source) != "server-only":
            return []
        return [
            self._finding(
                module,
                node=source,
                message="`server-only` imported from a client component.",
                evidence="server-only",
                suggestion="Move the import into a server component or drop the 'use client' directive.",
            )
        ]


@dataclass(frozen=True, slots=True)
class BrowserGlobalInServerComponent(BaseRule):
    meta = RuleMeta(
        rule_id="browser-global-in-server-component",
        title="browser global in server component",
        description="Detects `window.x`/`document.x` style member access in server components.",
        category="boundary-violation",
        default_severity="warn",
    )
    node_types = frozenset({"member_expression"})

    def on_node(self, node: Any, module: ModuleContext) -> list[Finding]:
        if not module.is_server:
            return []
        obj = node.child_by_field_name("object")
        if obj is None or obj.type != "identifier":
            return []
        name = module.node_text(obj)
        if name not in BROWSER_GLOBALS:
            return []
        return [
            self._finding(
                module,
                node=obj,
                message=f"Browser global `{name}` is undefined during server rendering.",
                evidence=name,
            )
        ]


def rsclint_rules() -> list[BaseRule]:
    return [ServerOnlyImportInClient(), BrowserGlobalInServerComponent()]


RULES = rsclint_rules()
