from __future__ import annotations

from typing import Any, Mapping

from .compare import deep_equal
from .tree import Literal, Nested, Node, Predicate, Updater, compile_query

_MISSING = object()


def _match_node(value: Any, node: Node) -> bool:
    if isinstance(node, Nested):
        if not isinstance(value, Mapping):
            return False
        return _match_fields(value, node)
    if isinstance(node, (Predicate, Updater)):
        return bool(node.fn(None if value is _MISSING else value))
    if isinstance(node, Literal):
        if value is _MISSING:
            return node.value is None
        return deep_equal(value, node.value)
    return False


def _match_fields(document: Mapping[str, Any], node: Nested) -> bool:
    for name, child in node.fields.items():
        if not _match_node(document.get(name, _MISSING), child):
            return False
    return True


def matches(document: Mapping[str, Any], query: Any) -> bool:
    """
    Return True if `document` satisfies `query`.

    `query` may be None (matches everything), a dict tree whose leaves are
    literals or predicates, a whole-document predicate, or a compiled node.
    Fields absent from the query impose no constraint.
    """
    node = compile_query(query)
    if isinstance(node, (Predicate, Updater)):
        return bool(node.fn(document))
    if isinstance(node, Nested):
        return _match_fields(document, node)
    # a bare literal compares the whole document
    return deep_equal(document, node.value)
