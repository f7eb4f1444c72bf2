from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from functools import lru_cache
from typing import Any, cast

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from rsclint.engine.context import SyntaxTree

# Grammar name -> capsule factory from the grammar package.
_GRAMMARS: dict[str, Callable[[], object]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}


class TreeSitterError(RuntimeError):
    """Raised when tree-sitter cannot load a language or parse source."""


def available_languages() -> tuple[str, ...]:
    return tuple(sorted(_GRAMMARS))


@lru_cache(maxsize=8)
def _get_language(language: str) -> Language:
    factory = _GRAMMARS.get(language)
    if factory is None:
        raise TreeSitterError(f"tree-sitter language not available: {language!r}")
    try:
        return Language(factory())
    except (TypeError, ValueError, RuntimeError) as exc:  # pragma: no cover (depends on installed grammars)
        raise TreeSitterError(f"failed to load tree-sitter grammar {language!r}: {exc}") from exc


_PARSER_LOCAL = threading.local()


def _get_parser(language: str) -> Parser:
    """
    Return a per-thread Parser instance for the requested language.

    tree-sitter Parser objects are not thread-safe; sharing a single cached
    Parser across threads can lead to crashes or corrupted parse output.
    """

    parsers: dict[str, Parser] | None = getattr(_PARSER_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _PARSER_LOCAL.parsers = parsers

    parser = parsers.get(language)
    if parser is not None:
        return parser

    parser = Parser(_get_language(language))
    parsers[language] = parser
    return parser


def parse(language: str, source: str) -> SyntaxTree:
    """
    Parse source code with tree-sitter.

    tree-sitter recovers from syntax errors instead of failing, so callers must
    check `tree.root_node.has_error` (see `first_syntax_error`) before trusting
    the tree.
    """

    parser = _get_parser(language)
    try:
        tree = parser.parse(source.encode("utf-8", errors="replace"))
    except (ValueError, TypeError, RuntimeError) as exc:
        raise TreeSitterError(f"tree-sitter failed to parse {language!r} source: {exc}") from exc
    return cast(SyntaxTree, tree)


def first_syntax_error(root: Any) -> Any | None:
    """Return the first ERROR or missing node in source order, or None for a clean tree."""

    if not getattr(root, "has_error", False):
        return None
    for node in _iter_nodes(root):
        if getattr(node, "type", None) == "ERROR" or getattr(node, "is_missing", False):
            return node
    return root


def _iter_nodes(node: Any) -> Iterator[Any]:
    stack = [node]
    while stack:
        n = stack.pop()
        yield n
        stack.extend(reversed(getattr(n, "children", [])))
