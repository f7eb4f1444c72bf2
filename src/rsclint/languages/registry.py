from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from types import MappingProxyType

# Source language -> file suffixes. JSX lives in .js/.jsx; TSX has its own grammar.
LANGUAGE_EXTENSIONS = MappingProxyType(
    {
        "javascript": (".js", ".jsx", ".mjs", ".cjs"),
        "typescript": (".ts", ".tsx", ".mts", ".cts"),
    }
)

_LANGUAGE_BY_SUFFIX = {suffix: name for name, suffixes in LANGUAGE_EXTENSIONS.items() for suffix in suffixes}
_GRAMMAR_BY_SUFFIX = {".tsx": "tsx"}


def detect_language(path: Path) -> str | None:
    """Language name for a source file, or None when rsclint does not analyze it."""

    return _LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


def allowed_extensions(enabled_languages: Iterable[str]) -> set[str]:
    wanted = {name.strip().lower() for name in enabled_languages}
    return {suffix for name in wanted for suffix in LANGUAGE_EXTENSIONS.get(name, ())}


def tree_sitter_language_for_path(path: Path, *, detected_language: str) -> str:
    # The JavaScript grammar understands JSX; TSX needs the dedicated grammar.
    return _GRAMMAR_BY_SUFFIX.get(path.suffix.lower(), detected_language)
