from __future__ import annotations

import json
from typing import Any

from .ids import ObjectId
from .transformers import default_registry, encode_tree


def _canonical(value: Any) -> str:
    return json.dumps(encode_tree(value, default_registry()), sort_keys=True, separators=(",", ":"))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def deep_equal(a: Any, b: Any) -> bool:
    """
    Structural equality used by literal queries and eq/neq.

    Lists and tuples compare element-wise and order-sensitively, booleans never
    equal numbers, and mixed types fall back to their canonical JSON forms.
    """
    if a is b:
        return True
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if _is_number(a) and _is_number(b):
        return a == b
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(v, b[k]) for k, v in a.items())
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))
    if type(a) is type(b) or isinstance(a, ObjectId) or isinstance(b, ObjectId):
        return a == b
    try:
        return _canonical(a) == _canonical(b)
    except (TypeError, ValueError):
        return a == b
