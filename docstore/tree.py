from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union


@dataclass(frozen=True)
class Literal:
    """Leaf compared by deep equality (queries) or assigned as-is (updates)."""

    value: Any


@dataclass(frozen=True)
class Predicate:
    fn: Callable[[Any], bool]


@dataclass(frozen=True)
class Updater:
    fn: Callable[[Any], Any]


@dataclass(frozen=True)
class Nested:
    fields: dict[str, "Node"] = field(default_factory=dict)


Node = Union[Literal, Predicate, Updater, Nested]

_NODE_TYPES = (Literal, Predicate, Updater, Nested)


def _compile(value: Any, leaf: type) -> Node:
    if isinstance(value, _NODE_TYPES):
        return value
    if isinstance(value, Mapping) and all(isinstance(k, str) for k in value):
        return Nested({k: _compile(v, leaf) for k, v in value.items()})
    if callable(value) and not isinstance(value, type):
        return leaf(value)
    # lists, tuples and transformer-backed values are opaque leaves
    return Literal(value)


def compile_query(query: Any) -> Node:
    """
    Turn a user query (dict tree, whole-document predicate or None) into nodes.
    """
    if query is None:
        return Nested()
    return _compile(query, Predicate)


def compile_update(update: Any) -> Node:
    """
    Turn a user update (dict tree or whole-document function) into nodes.
    """
    if update is None:
        return Nested()
    return _compile(update, Updater)
