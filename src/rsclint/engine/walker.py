from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any, Literal

NodeKind = Literal[
    "module-item",
    "string-literal",
    "call-expression",
    "await-expression",
    "variable-declaration",
    "function-declaration",
    "function-expression",
    "identifier",
]

# Grammar node types (tree-sitter JavaScript/TypeScript/TSX) grouped into the
# node kinds rules reason about. Anything missing here is simply "other".
NODE_KINDS: dict[str, NodeKind] = {
    "expression_statement": "module-item",
    "import_statement": "module-item",
    "export_statement": "module-item",
    "string": "string-literal",
    "call_expression": "call-expression",
    "await_expression": "await-expression",
    "lexical_declaration": "variable-declaration",
    "variable_declaration": "variable-declaration",
    "function_declaration": "function-declaration",
    "generator_function_declaration": "function-declaration",
    "arrow_function": "function-expression",
    "function_expression": "function-expression",
    "function": "function-expression",
    "generator_function": "function-expression",
    "identifier": "identifier",
}

ChildResolver = Callable[[Any], Sequence[Any]]


def _no_children(_node: Any) -> Sequence[Any]:
    return ()


def _named_children(node: Any) -> Sequence[Any]:
    return getattr(node, "named_children", None) or ()


# Leaves never hold expressions worth visiting. Template strings are not listed
# because `${...}` substitutions can contain calls and awaits.
_LEAF_TYPES = (
    "comment",
    "hash_bang_line",
    "string",
    "number",
    "regex",
    "identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "type_identifier",
    "private_property_identifier",
    "jsx_text",
    "true",
    "false",
    "null",
    "undefined",
    "this",
    "super",
)

# Declarations that hide function bodies are listed explicitly: a declarator's
# named children are its name, type annotation and initializer, and a
# function's are its parameters (defaults may call hooks) and body.
DESCENT: dict[str, ChildResolver] = {
    **{node_type: _no_children for node_type in _LEAF_TYPES},
    "lexical_declaration": _named_children,
    "variable_declaration": _named_children,
    "variable_declarator": _named_children,
    "function_declaration": _named_children,
    "generator_function_declaration": _named_children,
    "arrow_function": _named_children,
    "function_expression": _named_children,
    "function": _named_children,
    "method_definition": _named_children,
}


def node_kind(node: Any) -> NodeKind | None:
    return NODE_KINDS.get(getattr(node, "type", ""))


def children_of(node: Any) -> Sequence[Any]:
    resolver = DESCENT.get(getattr(node, "type", ""), _named_children)
    return resolver(node)


def iter_preorder(root: Any) -> Iterator[Any]:
    """
    Depth-first pre-order traversal driven by the `DESCENT` table.

    Uses an explicit stack, so deeply nested expressions cannot hit the
    interpreter recursion limit.
    """

    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children_of(node)))


def top_level_statements(root: Any) -> list[Any]:
    """Statements of a `program` node, without comments or a leading hash-bang."""

    return [
        child
        for child in _named_children(root)
        if getattr(child, "type", None) not in {"comment", "hash_bang_line"}
    ]
