from __future__ import annotations

from pathlib import Path

import pytest
from helpers import FakeNode, FakeSource, analyze_source

from rsclint.engine.context import ModuleContext, ProjectContext
from rsclint.rules.boundary import ClientHookInServerComponent, callee_identifier, is_client_hook


@pytest.mark.parametrize("name", ["use", "useState", "useEffect", "useMyCustomHook", "useID"])
def test_is_client_hook_accepts_hook_names(name: str) -> None:
    assert is_client_hook(name)


@pytest.mark.parametrize("name", ["user", "usefulThing", "used", "uses", "fetch", "Use", "_useState", ""])
def test_is_client_hook_rejects_ordinary_names(name: str) -> None:
    assert not is_client_hook(name)


def test_rule_flags_hook_call_in_server_module_fake_tree() -> None:
    src = FakeSource("useState(0);\n")
    call = src.call("useState")
    module = ModuleContext(path=Path("page.tsx"), source=src.raw, scope="server")

    findings = ClientHookInServerComponent().on_node(call, module)

    assert len(findings) == 1
    finding = findings[0]
    assert finding.rule_id == "client-hook-in-server-component"
    assert finding.category == "boundary-violation"
    assert finding.evidence == "useState"
    assert finding.severity == "error"
    assert finding.source_line == 1
    assert finding.source_file == Path("page.tsx")


def test_rule_ignores_client_modules_fake_tree() -> None:
    src = FakeSource("useState(0);\n")
    module = ModuleContext(path=Path("page.tsx"), source=src.raw, scope="client")
    assert ClientHookInServerComponent().on_node(src.call("useState"), module) == []


def test_callee_identifier_ignores_member_callees() -> None:
    member = FakeNode("member_expression")
    call = FakeNode("call_expression", children=[member], fields={"function": member})
    assert callee_identifier(call) is None


def test_server_module_reports_each_hook_call(project_ctx: ProjectContext) -> None:
    content = (
        "export default function Page() {\n"
        "  const [a, setA] = useState(0);\n"
        "  const [b] = useState(1);\n"
        "  useEffect(() => setA(b), [b]);\n"
        "  return <p>{a}</p>;\n"
        "}\n"
    )
    findings = analyze_source(project_ctx, content)
    assert [f.evidence for f in findings] == ["useState", "useState", "useEffect"]
    assert all(f.category == "boundary-violation" for f in findings)


def test_nested_hook_calls_are_reported_independently(project_ctx: ProjectContext) -> None:
    content = "function Page() {\n  const v = useMemo(() => useContext(Ctx), []);\n  return v;\n}\n"
    findings = analyze_source(project_ctx, content)
    assert [f.evidence for f in findings] == ["useMemo", "useContext"]


def test_member_access_and_non_hook_calls_are_not_reported(project_ctx: ProjectContext) -> None:
    content = (
        "import React from 'react';\n"
        "export default function Page() {\n"
        "  const [a] = React.useState(0);\n"
        "  const user = getUser();\n"
        "  usefulThing(user);\n"
        "  return a;\n"
        "}\n"
    )
    assert analyze_source(project_ctx, content) == []


def test_hook_in_parameter_default_is_reported(project_ctx: ProjectContext) -> None:
    content = "export function Page({ theme = useTheme() }) {\n  return theme;\n}\n"
    findings = analyze_source(project_ctx, content)
    assert [f.evidence for f in findings] == ["useTheme"]


def test_typescript_generic_hook_call_is_reported(project_ctx: ProjectContext) -> None:
    content = "export function counter(): number {\n  const [n] = useState<number>(0);\n  return n;\n}\n"
    findings = analyze_source(project_ctx, content, relpath="lib/counter.ts")
    assert [f.evidence for f in findings] == ["useState"]


def test_client_module_never_reports_hooks(project_ctx: ProjectContext) -> None:
    content = (
        '"use client";\n'
        "export default function Page() {\n"
        "  const [a] = useState(0);\n"
        "  const inner = () => { useEffect(() => {}); };\n"
        "  return <button onClick={inner}>{a}</button>;\n"
        "}\n"
    )
    findings = analyze_source(project_ctx, content)
    assert [f for f in findings if f.category == "boundary-violation"] == []
