from __future__ import annotations

from dataclasses import dataclass

import pytest

from rsclint.rules.base import BaseRule, RuleMeta
from rsclint.rules.registry import all_rules, builtin_rules, rule_by_id, rule_ids, rule_meta_by_id, set_extra_rules


def _meta(rule_id: str) -> RuleMeta:
    return RuleMeta(
        rule_id=rule_id,
        title="Plugin rule",
        description="plugin",
        category="optimization-opportunity",
        default_severity="info",
    )


@dataclass(frozen=True, slots=True)
class _PluginRule(BaseRule):
    meta = _meta("plugin-rule")


@dataclass(frozen=True, slots=True)
class _BadIdRule(BaseRule):
    meta = _meta("Plugin_Rule")


@dataclass(frozen=True, slots=True)
class _ShadowRule(BaseRule):
    meta = _meta("movable-data-fetch")


def test_builtin_rules_are_ordered_boundary_first() -> None:
    assert [r.meta.rule_id for r in builtin_rules()] == ["client-hook-in-server-component", "movable-data-fetch"]
    assert [r.meta.category for r in builtin_rules()] == ["boundary-violation", "optimization-opportunity"]


def test_rule_registry_caches_invalidate_when_plugins_change() -> None:
    assert rule_by_id("plugin-rule") is None
    assert "plugin-rule" not in rule_meta_by_id()

    set_extra_rules([_PluginRule()])
    assert rule_by_id("plugin-rule") is not None
    assert "plugin-rule" in rule_meta_by_id()
    assert all_rules()[-1].meta.rule_id == "plugin-rule"
    assert "plugin-rule" in rule_ids()

    set_extra_rules([])
    assert rule_by_id("plugin-rule") is None
    assert "plugin-rule" not in rule_meta_by_id()


@pytest.mark.parametrize(
    ("rules", "message"),
    [
        ([_BadIdRule()], "kebab-case"),
        ([_ShadowRule()], "conflicts with built-in"),
        ([_PluginRule(), _PluginRule()], "Duplicate plugin rule id"),
    ],
)
def test_set_extra_rules_rejects_invalid_plugins(rules: list[BaseRule], message: str) -> None:
    with pytest.raises(RuntimeError, match=message):
        set_extra_rules(rules)
