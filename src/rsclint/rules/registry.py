from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType

from rsclint.config import RULE_ID_RE
from rsclint.rules.base import BaseRule, RuleMeta
from rsclint.rules.boundary import builtin_boundary_rules
from rsclint.rules.optimization import builtin_optimization_rules

# Plugin rules registered for this process, in registration order.
_plugin_rules: tuple[BaseRule, ...] = ()


def _check_rule_id(rule_id: str, *, origin: str) -> None:
    if not RULE_ID_RE.match(rule_id):
        raise RuntimeError(f"{origin} rule id must be lowercase kebab-case ({RULE_ID_RE.pattern}): {rule_id!r}")


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[BaseRule, ...]:
    """Built-in rules in dispatch order: boundary checks first, then optimizations."""

    rules = (*builtin_boundary_rules(), *builtin_optimization_rules())
    ids = [rule.meta.rule_id for rule in rules]
    for rule_id in ids:
        _check_rule_id(rule_id, origin="Built-in")
    if len(set(ids)) != len(ids):  # pragma: no cover
        raise RuntimeError(f"Duplicate built-in rule ids: {ids}")
    return rules


def set_extra_rules(rules: Iterable[BaseRule]) -> None:
    """
    Replace the process-wide plugin rules.

    IDs must be kebab-case, unique, and distinct from built-in IDs. On error
    the previous registration is kept.
    """

    global _plugin_rules  # noqa: PLW0603

    builtin_ids = {rule.meta.rule_id for rule in builtin_rules()}
    accepted: dict[str, BaseRule] = {}
    for rule in rules:
        rule_id = rule.meta.rule_id
        _check_rule_id(rule_id, origin="Plugin")
        if rule_id in builtin_ids:
            raise RuntimeError(f"Plugin rule id conflicts with built-in rule id: {rule_id}")
        if rule_id in accepted:
            raise RuntimeError(f"Duplicate plugin rule id: {rule_id}")
        accepted[rule_id] = rule
    _plugin_rules = tuple(accepted.values())


def all_rules() -> tuple[BaseRule, ...]:
    # Built-ins keep their fixed order; plugins follow.
    return (*builtin_rules(), *_plugin_rules)


def rule_ids() -> set[str]:
    return {rule.meta.rule_id for rule in all_rules()}


def rule_meta_by_id() -> Mapping[str, RuleMeta]:
    return MappingProxyType({rule.meta.rule_id: rule.meta for rule in all_rules()})


def rule_by_id(rule_id: str) -> BaseRule | None:
    return next((rule for rule in all_rules() if rule.meta.rule_id == rule_id), None)
