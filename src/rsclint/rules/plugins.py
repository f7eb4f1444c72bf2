from __future__ import annotations

import importlib
import logging
from collections.abc import Sequence
from types import ModuleType
from typing import Any

from rsclint.rules.base import BaseRule

logger = logging.getLogger(__name__)

# Names looked up on a plugin module when the spec has no `:attr` part.
PLUGIN_EXPORTS = ("rsclint_rules", "RULES")
_MISSING = object()


class PluginLoadError(RuntimeError):
    """A configured plugin could not be imported or exposes no usable rules."""


def load_plugin_rules(plugin_specs: Sequence[str]) -> list[BaseRule]:
    """
    Collect rule instances from plugin specs (`package.module` or `package.module:attr`).

    The export may be a list/tuple of `BaseRule` instances or a zero-argument
    callable returning one.
    """

    loaded: list[BaseRule] = []
    for spec in (s.strip() for s in plugin_specs):
        if spec:
            found = _rules_from_spec(spec)
            logger.debug("plugin %s: %d rule(s)", spec, len(found))
            loaded.extend(found)
    return loaded


def _rules_from_spec(spec: str) -> list[BaseRule]:
    module_name, _, attr = spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:  # noqa: BLE001
        raise PluginLoadError(f"Failed to import plugin module {module_name!r}: {exc}") from exc

    export = _module_export(module) if not attr else getattr(module, attr, _MISSING)
    if export is _MISSING:
        raise PluginLoadError(f"Plugin module {module_name!r} has no attribute {attr!r}")
    return _as_rules(export)


def _module_export(module: ModuleType) -> Any:
    for name in PLUGIN_EXPORTS:
        if hasattr(module, name):
            return getattr(module, name)
    raise PluginLoadError(f"Plugin module {module.__name__!r} must define `rsclint_rules()` or `RULES`.")


def _as_rules(export: Any) -> list[BaseRule]:
    if callable(export) and not isinstance(export, BaseRule):
        export = export()
    if not isinstance(export, list | tuple):
        raise PluginLoadError(f"Unsupported plugin export type: {type(export).__name__}")
    bad = [type(item).__name__ for item in export if not isinstance(item, BaseRule)]
    if bad:
        raise PluginLoadError(f"Plugin rules must be BaseRule instances, got: {', '.join(bad)}")
    return list(export)
