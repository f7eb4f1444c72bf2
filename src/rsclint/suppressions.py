from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

WILDCARD = "all"


@dataclass(frozen=True, slots=True)
class Suppressions:
    """
    Rule IDs silenced by `rsclint:` comments in one file.

    Directives (case-insensitive, in any comment style):
    - `rsclint: disable-file=movable-data-fetch` anywhere silences the whole file
    - `rsclint: disable=client-hook-in-server-component` silences its own line
    - `rsclint: disable-next-line=all` silences the following line

    Lines are real 1-based source lines, independent of report line mapping.
    """

    disabled_in_file: frozenset[str] = frozenset()
    disabled_on_line: Mapping[int, frozenset[str]] = field(default_factory=lambda: MappingProxyType({}))

    def is_suppressed(self, rule_id: str, *, line: int | None) -> bool:
        rule_id = rule_id.lower()
        scopes = [self.disabled_in_file]
        if line is not None:
            scopes.append(self.disabled_on_line.get(line, frozenset()))
        return any(WILDCARD in ids or rule_id in ids for ids in scopes)


_DIRECTIVE_RE = re.compile(
    r"rsclint:\s*(?P<kind>disable-next-line|disable[-_]?file|disable)\s*=\s*(?P<ids>[a-z0-9_,\-\s]+)",
    re.IGNORECASE,
)


def parse_suppressions(lines: Sequence[str]) -> Suppressions:
    in_file: set[str] = set()
    by_line: dict[int, set[str]] = {}

    for lineno, text in enumerate(lines, start=1):
        for match in _DIRECTIVE_RE.finditer(text):
            ids = {token.lower() for token in re.split(r"[,\s]+", match.group("ids")) if token}
            kind = match.group("kind").lower()
            if kind == "disable":
                by_line.setdefault(lineno, set()).update(ids)
            elif kind == "disable-next-line":
                by_line.setdefault(lineno + 1, set()).update(ids)
            else:
                in_file.update(ids)

    return Suppressions(
        disabled_in_file=frozenset(in_file),
        disabled_on_line=MappingProxyType({lineno: frozenset(ids) for lineno, ids in by_line.items()}),
    )
