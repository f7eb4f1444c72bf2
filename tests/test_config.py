from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from rsclint.config import (
    ConfigError,
    RsclintConfig,
    RulesConfig,
    compute_enabled_rule_ids,
    load_config,
    path_is_ignored,
)


def test_load_config_defaults_when_no_files(tmp_path: Path) -> None:
    config = load_config(tmp_path)
    assert config == RsclintConfig()
    assert config.line_mapping == "approximate"
    assert config.languages == ("javascript", "typescript")


def test_load_config_reads_tool_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[tool.rsclint]
languages = ["typescript"]
line-mapping = "exact"
fail-on-findings = true
plugins = ["my_rules:rules"]

[tool.rsclint.rules]
enable = ["boundary", "movable-data-fetch"]
disable = ["movable-data-fetch"]

[tool.rsclint.rules.client-hook-in-server-component]
severity = "warning"

[tool.rsclint.ignore]
paths = [".storybook/"]
""".lstrip(),
        encoding="utf-8",
    )

    config = load_config(tmp_path)
    assert config.languages == ("typescript",)
    assert config.line_mapping == "exact"
    assert config.fail_on_findings is True
    assert config.plugins == ("my_rules:rules",)
    assert config.rules.enable == ("boundary", "movable-data-fetch")
    assert config.rules.disable == ("movable-data-fetch",)
    assert config.severity_for("client-hook-in-server-component") == "warn"
    assert config.ignore.paths == (".storybook/",)


def test_standalone_config_wins_over_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[tool.rsclint]\nline-mapping = "exact"\n', encoding="utf-8")
    (tmp_path / ".rsclint.toml").write_text("fail-on-findings = true\n", encoding="utf-8")

    config = load_config(tmp_path)
    assert config.fail_on_findings is True
    assert config.line_mapping == "approximate"


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ('line-mapping = "rough"\n', "line-mapping"),
        ("fail-on-findings = 1\n", "fail-on-findings"),
        ('languages = ["python"]\n', "unsupported languages"),
        ('languages = "typescript"\n', "languages"),
        ('[rules]\nenable = ["Not A Rule!"]\n', "unknown rule group"),
        ('[rules.movable-data-fetch]\nseverity = "fatal"\n', "severity"),
        ("[rules.BadId_]\nseverity = \"info\"\n", "rule id"),
        ("ignore = 3\n", "ignore"),
        ("this is not toml\n", "Invalid TOML"),
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, body: str, message: str) -> None:
    (tmp_path / ".rsclint.toml").write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_config(tmp_path)


def test_compute_enabled_rule_ids_groups_and_ids() -> None:
    all_ids = {"client-hook-in-server-component", "movable-data-fetch"}
    assert compute_enabled_rule_ids(RsclintConfig()) == all_ids

    only_boundary = replace(RsclintConfig(), rules=RulesConfig(enable=("boundary",)))
    assert compute_enabled_rule_ids(only_boundary) == {"client-hook-in-server-component"}

    minus_opt = replace(RsclintConfig(), rules=RulesConfig(disable=("optimization",)))
    assert compute_enabled_rule_ids(minus_opt) == {"client-hook-in-server-component"}

    explicit = replace(RsclintConfig(), rules=RulesConfig(enable=("Movable-Data-Fetch",)))
    assert compute_enabled_rule_ids(explicit) == {"movable-data-fetch"}


def test_compute_enabled_rule_ids_all_includes_available_plugins() -> None:
    enabled = compute_enabled_rule_ids(
        RsclintConfig(),
        available_rule_ids={"client-hook-in-server-component", "movable-data-fetch", "my-plugin-rule"},
    )
    assert "my-plugin-rule" in enabled


def test_path_is_ignored_patterns(tmp_path: Path) -> None:
    target = tmp_path / "app" / "legacy" / "old.generated.tsx"
    target.parent.mkdir(parents=True)
    target.write_text("", encoding="utf-8")

    assert path_is_ignored(target, project_root=tmp_path, ignore_patterns=["app/legacy/"])
    assert path_is_ignored(target, project_root=tmp_path, ignore_patterns=["*.generated.tsx"])
    assert path_is_ignored(target, project_root=tmp_path, ignore_patterns=["app/*/old.*"])
    assert not path_is_ignored(target, project_root=tmp_path, ignore_patterns=["lib/", "", "*.js"])
    assert not path_is_ignored(Path("/elsewhere/x.tsx"), project_root=tmp_path, ignore_patterns=["*.tsx"])
