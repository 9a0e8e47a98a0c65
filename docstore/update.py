from __future__ import annotations

from typing import Any, Mapping, MutableMapping

from .tree import Literal, Nested, Node, Predicate, Updater, compile_update


def _apply_fields(document: MutableMapping[str, Any], node: Nested) -> None:
    for name, child in node.fields.items():
        current = document.get(name)
        if isinstance(child, Nested):
            if isinstance(current, MutableMapping):
                _apply_fields(current, child)
            else:
                fresh: dict[str, Any] = {}
                _apply_fields(fresh, child)
                document[name] = fresh
        elif isinstance(child, (Updater, Predicate)):
            document[name] = child.fn(current)
        elif isinstance(child, Literal):
            document[name] = child.value


def apply_update(document: MutableMapping[str, Any], update: Any) -> MutableMapping[str, Any]:
    """
    Apply `update` to `document` in place and return the same object.

    A dict tree is a deep partial merge: literals replace fields, callables map
    the old value to the new one, nested dicts recurse. A whole-document
    function may mutate the document and/or return a mapping whose top-level
    fields are merged back.
    """
    node = compile_update(update)
    if isinstance(node, (Updater, Predicate)):
        result = node.fn(document)
        if isinstance(result, Mapping) and result is not document:
            for name, value in list(result.items()):
                document[name] = value
    elif isinstance(node, Nested):
        _apply_fields(document, node)
    elif isinstance(node, Literal) and isinstance(node.value, Mapping):
        document.update(node.value)
    return document
