from __future__ import annotations

import fnmatch
import re
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

from rsclint.engine.types import LineMapping, Severity


class ConfigError(ValueError):
    """Invalid rsclint configuration; the message names the offending key."""


RuleId = str
RuleGroup = str

RULE_ID_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")

CONFIG_FILENAME = ".rsclint.toml"
DEFAULT_LANGUAGES: tuple[str, ...] = ("javascript", "typescript")
DEFAULT_LINE_MAPPING: LineMapping = "approximate"

_SEVERITIES = ("info", "warn", "error")
_LINE_MAPPINGS = ("approximate", "exact")
_SEVERITY_ALIASES = {"warning": "warn"}

# Built-in rule groups. Kept here so config can be resolved without importing rules.
DEFAULT_RULE_GROUPS: Mapping[RuleGroup, tuple[RuleId, ...]] = MappingProxyType(
    {
        "boundary": ("client-hook-in-server-component",),
        "optimization": ("movable-data-fetch",),
        "all": ("client-hook-in-server-component", "movable-data-fetch"),
    }
)


@dataclass(frozen=True, slots=True)
class RuleOverride:
    severity: Severity | None = None


@dataclass(frozen=True, slots=True)
class RulesConfig:
    enable: str | tuple[str, ...] = "all"
    disable: tuple[str, ...] = ()
    overrides: Mapping[RuleId, RuleOverride] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True, slots=True)
class IgnoreConfig:
    paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RsclintConfig:
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    line_mapping: LineMapping = DEFAULT_LINE_MAPPING
    fail_on_findings: bool = False
    rules: RulesConfig = field(default_factory=RulesConfig)
    ignore: IgnoreConfig = field(default_factory=IgnoreConfig)
    plugins: tuple[str, ...] = ()

    def severity_for(self, rule_id: str) -> Severity | None:
        override = self.rules.overrides.get(rule_id)
        return None if override is None else override.severity


def _choice(value: Any, choices: tuple[str, ...], *, field_name: str, aliases: Mapping[str, str] | None = None) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"`{field_name}` must be a string.")
    normalized = value.strip().lower()
    normalized = (aliases or {}).get(normalized, normalized)
    if normalized not in choices:
        raise ConfigError(f"`{field_name}` must be one of: {', '.join(choices)}.")
    return normalized


def validate_line_mapping(value: Any, *, field_name: str = "line-mapping") -> LineMapping:
    return cast(LineMapping, _choice(value, _LINE_MAPPINGS, field_name=field_name))


def _str_list(value: Any, *, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"`{field_name}` must be a list of strings.")
    return tuple(item.strip() for item in value)


def _table(value: Any, *, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"`{field_name}` must be a table.")
    return value


def _get(table: Mapping[str, Any], key: str, default: Any) -> Any:
    # TOML keys are kebab-case; snake_case spellings are accepted too.
    return table.get(key, table.get(key.replace("-", "_"), default))


def load_config(project_dir: Path | str = ".") -> RsclintConfig:
    """
    Load configuration for the project rooted at `project_dir`.

    `.rsclint.toml` (top-level keys) takes precedence over the
    `[tool.rsclint]` table of `pyproject.toml`; with neither, defaults apply.
    """

    root = Path(project_dir)
    standalone = root / CONFIG_FILENAME
    if standalone.exists():
        return _parse_config(_read_toml(standalone), prefix="")

    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return RsclintConfig()
    tool = _read_toml(pyproject).get("tool")
    table = tool.get("rsclint") if isinstance(tool, dict) else None
    if not isinstance(table, dict) or not table:
        return RsclintConfig()
    return _parse_config(table, prefix="tool.rsclint.")


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _parse_config(table: dict[str, Any], *, prefix: str) -> RsclintConfig:
    raw_languages = _str_list(table.get("languages", list(DEFAULT_LANGUAGES)), field_name=f"{prefix}languages")
    languages = tuple(name.lower() for name in raw_languages)
    unsupported = sorted(set(languages) - set(DEFAULT_LANGUAGES))
    if unsupported:
        raise ConfigError(f"`{prefix}languages` contains unsupported languages: {', '.join(unsupported)}.")

    fail_on_findings = _get(table, "fail-on-findings", False)
    if not isinstance(fail_on_findings, bool):
        raise ConfigError(f"`{prefix}fail-on-findings` must be a boolean.")

    ignore = _table(table.get("ignore"), field_name=f"{prefix}ignore")
    return RsclintConfig(
        languages=languages,
        line_mapping=validate_line_mapping(
            _get(table, "line-mapping", DEFAULT_LINE_MAPPING),
            field_name=f"{prefix}line-mapping",
        ),
        fail_on_findings=fail_on_findings,
        rules=_parse_rules(_table(table.get("rules"), field_name=f"{prefix}rules"), field_name=f"{prefix}rules"),
        ignore=IgnoreConfig(paths=_str_list(ignore.get("paths"), field_name=f"{prefix}ignore.paths")),
        plugins=_str_list(table.get("plugins"), field_name=f"{prefix}plugins"),
    )


def _parse_rules(table: dict[str, Any], *, field_name: str) -> RulesConfig:
    raw_enable = table.get("enable", "all")
    enable: str | tuple[str, ...]
    if isinstance(raw_enable, str):
        tokens = _split_tokens([raw_enable])
        if not tokens:
            enable = "all"
        elif len(tokens) == 1:
            enable = tokens[0]
        else:
            enable = tokens
    elif isinstance(raw_enable, list) and all(isinstance(item, str) for item in raw_enable):
        enable = _split_tokens(raw_enable)
    else:
        raise ConfigError(f"`{field_name}.enable` must be a string or a list of strings.")
    disable = _split_tokens(_str_list(table.get("disable"), field_name=f"{field_name}.disable"))

    for key, tokens in (("enable", (enable,) if isinstance(enable, str) else enable), ("disable", disable)):
        for token in tokens:
            if not _is_known_token(token):
                raise ConfigError(
                    f"`{field_name}.{key}` contains unknown rule group or invalid rule id: {token!r}. "
                    f"Valid groups: {', '.join(sorted(DEFAULT_RULE_GROUPS))}."
                )

    overrides: dict[RuleId, RuleOverride] = {}
    for key, sub in table.items():
        if key in {"enable", "disable"} or not isinstance(sub, dict):
            continue
        rule_id = str(key).strip().lower()
        if not RULE_ID_RE.match(rule_id):
            raise ConfigError(f"`{field_name}.{key}` is invalid; expected a rule id like movable-data-fetch.")
        severity = sub.get("severity")
        if severity is not None:
            severity = _choice(
                severity,
                _SEVERITIES,
                field_name=f"{field_name}.{key}.severity",
                aliases=_SEVERITY_ALIASES,
            )
        overrides[rule_id] = RuleOverride(severity=cast("Severity | None", severity))

    return RulesConfig(enable=enable, disable=disable, overrides=MappingProxyType(overrides))


def _split_tokens(values: Iterable[str]) -> tuple[str, ...]:
    # "a, b; c" and ["a", "b,c"] both work.
    return tuple(token.strip() for value in values for token in value.replace(";", ",").split(",") if token.strip())


def _normalize_group(value: str) -> str:
    return value.strip().lower().replace("_", "-")


def _is_known_token(token: str) -> bool:
    return _normalize_group(token) in DEFAULT_RULE_GROUPS or bool(RULE_ID_RE.match(token.strip().lower()))


def compute_enabled_rule_ids(
    config: RsclintConfig,
    *,
    available_rule_ids: Iterable[RuleId] | None = None,
) -> set[RuleId]:
    """
    Resolve `rules.enable` minus `rules.disable` into rule IDs.

    Tokens are groups (`all`, `boundary`, `optimization`) or rule IDs. With
    `available_rule_ids`, `all` also covers plugin rules and the result only
    keeps IDs that actually exist.
    """

    available = set(available_rule_ids) if available_rule_ids is not None else None
    enable = config.rules.enable
    enabled: set[RuleId] = set()
    for token in (enable,) if isinstance(enable, str) else enable:
        enabled |= _expand_token(token, available=available)
    for token in config.rules.disable:
        enabled -= _expand_token(token, available=available)
    return enabled if available is None else enabled & available


def _expand_token(token: str, *, available: set[RuleId] | None) -> set[RuleId]:
    group = _normalize_group(token)
    if group == "all" and available is not None:
        return set(available)
    if group in DEFAULT_RULE_GROUPS:
        return set(DEFAULT_RULE_GROUPS[group])
    return {token.strip().lower()}


def path_is_ignored(path: Path, *, project_root: Path, ignore_patterns: Iterable[str]) -> bool:
    """
    True if `path` matches one of `ignore_patterns`.

    Patterns apply to the POSIX path relative to `project_root`:
    `storybook/` is a directory prefix, `*.generated.tsx` matches basenames and
    `app/*/legacy/*.tsx` matches the whole relative path. Paths outside the
    root are never ignored.
    """

    try:
        relative = path.resolve().relative_to(project_root.resolve())
    except (ValueError, OSError, RuntimeError):
        return False
    rel_posix = relative.as_posix()
    return any(_pattern_matches(pattern, rel_posix, relative.name) for pattern in ignore_patterns)


def _pattern_matches(raw_pattern: str, rel_posix: str, basename: str) -> bool:
    pattern = raw_pattern.strip().replace("\\", "/").removeprefix("./")
    if not pattern:
        return False
    if pattern.endswith("/"):
        return rel_posix.startswith(pattern)
    if "/" in pattern:
        return fnmatch.fnmatch(rel_posix, pattern)
    return fnmatch.fnmatch(basename, pattern) or fnmatch.fnmatch(rel_posix, pattern)
