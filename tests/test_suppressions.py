from __future__ import annotations

import pytest

from rsclint.suppressions import parse_suppressions


def test_parse_suppressions_normalizes_ids_case_insensitively() -> None:
    suppressions = parse_suppressions(
        [
            "const [a] = useState(0); // rsclint: disable=Client-Hook-In-Server-Component,movable-data-fetch\n",
            "// RSCLINT: disable-next-line=all\n",
            "useEffect(() => {});\n",
        ]
    )

    assert suppressions.is_suppressed("client-hook-in-server-component", line=1)
    assert suppressions.is_suppressed("MOVABLE-DATA-FETCH", line=1)
    assert suppressions.is_suppressed("anything", line=3)  # all is a wildcard

    assert not suppressions.is_suppressed("client-hook-in-server-component", line=2)


def test_disable_file_suppresses_rule_ids_anywhere_in_file() -> None:
    suppressions = parse_suppressions(
        [
            "/* rsclint: disable-file=movable-data-fetch */\n",
            '"use client";\n',
            "await load(); // rsclint: disable-next-line=client-hook-in-server-component\n",
            "useState();\n",
        ]
    )

    assert suppressions.is_suppressed("movable-data-fetch", line=None)
    assert suppressions.is_suppressed("movable-data-fetch", line=999)

    assert suppressions.is_suppressed("client-hook-in-server-component", line=4)
    assert not suppressions.is_suppressed("client-hook-in-server-component", line=3)


def test_suppressions_mapping_is_read_only() -> None:
    suppressions = parse_suppressions(["useState(); // rsclint: disable=movable-data-fetch\n"])
    assert isinstance(suppressions.disabled_on_line[1], frozenset)

    with pytest.raises(TypeError):
        suppressions.disabled_on_line[1] = frozenset()  # type: ignore[index]


def test_line_suppression_needs_a_line() -> None:
    suppressions = parse_suppressions(["useState(); // rsclint: disable=movable-data-fetch\n"])
    assert suppressions.is_suppressed("movable-data-fetch", line=None) is False


def test_parse_suppressions_ignores_empty_tokens() -> None:
    suppressions = parse_suppressions(["x(); // rsclint: disable=, movable-data-fetch ,\n"])
    assert suppressions.is_suppressed("movable-data-fetch", line=1) is True
