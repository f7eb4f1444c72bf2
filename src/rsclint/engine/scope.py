from __future__ import annotations

import re
from typing import Any

from rsclint.engine.types import Scope
from rsclint.engine.walker import top_level_statements

DIRECTIVE = "use client"

_QUOTES = ("'", '"')

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SINGLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}
_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}


def classify(root: Any, source: bytes) -> Scope:
    """
    Decide a module's rendering scope from its first top-level statement.

    A module is a client module only when the very first statement is the
    bare `"use client"` directive. A directive anywhere else, or an empty
    module, leaves the module server-only.
    """

    statements = top_level_statements(root)
    if statements and is_directive_statement(statements[0], source):
        return "client"
    return "server"


def is_directive_statement(node: Any, source: bytes) -> bool:
    if getattr(node, "type", None) != "expression_statement":
        return False
    expressions = [c for c in getattr(node, "named_children", None) or () if c.type != "comment"]
    if len(expressions) != 1 or expressions[0].type != "string":
        return False
    return string_value(expressions[0], source) == DIRECTIVE


def string_value(node: Any, source: bytes) -> str | None:
    """
    Value of a quoted string literal with escapes resolved, or None if it is not quoted.

    `"use\\u0020client"` and `"use client"` have the same value.
    """

    raw = source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
    if len(raw) < 2 or raw[0] not in _QUOTES or raw[-1] != raw[0]:
        return None
    return _ESCAPE_RE.sub(_unescape, raw[1:-1])


def _unescape(match: re.Match[str]) -> str:
    escape = match.group(1)
    if escape in _LINE_CONTINUATIONS:
        return ""
    if escape[0] in "ux" and len(escape) > 1:
        digits = escape[2:-1] if escape.startswith("u{") else escape[1:]
        try:
            return chr(int(digits, 16))
        except ValueError:
            return match.group(0)
    return _SINGLE_ESCAPES.get(escape, escape)
