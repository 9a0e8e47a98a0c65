from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from .compare import deep_equal

PredicateFn = Callable[[Any], bool]
UpdaterFn = Callable[[Any], Any]


def _safe(test: PredicateFn) -> PredicateFn:
    # ill-typed field values (missing fields, strings vs numbers, ...) never match
    def predicate(value: Any) -> bool:
        try:
            return bool(test(value))
        except TypeError:
            return False

    return predicate


def _member(item: Any, container: Any) -> bool:
    if isinstance(container, (list, tuple)):
        return any(deep_equal(item, x) for x in container)
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    return item in container


# --- comparison -------------------------------------------------------------


def between(lo: Any, hi: Any, inclusive: bool = True) -> PredicateFn:
    """Checks if a value is between `lo` and `hi`."""
    if inclusive:
        return _safe(lambda v: lo <= v <= hi)
    return _safe(lambda v: lo < v < hi)


def gt(x: Any) -> PredicateFn:
    return _safe(lambda v: v > x)


def gte(x: Any) -> PredicateFn:
    return _safe(lambda v: v >= x)


def lt(x: Any) -> PredicateFn:
    return _safe(lambda v: v < x)


def lte(x: Any) -> PredicateFn:
    return _safe(lambda v: v <= x)


def eq(x: Any) -> PredicateFn:
    return lambda v: deep_equal(v, x)


def neq(x: Any) -> PredicateFn:
    return lambda v: not deep_equal(v, x)


# --- membership -------------------------------------------------------------


def in_(collection: Iterable[Any]) -> PredicateFn:
    """Checks if the field value is one of `collection` (a list, set, str, ...)."""
    return _safe(lambda v: _member(v, collection))


def not_in(collection: Iterable[Any]) -> PredicateFn:
    return _safe(lambda v: not _member(v, collection))


def contains(x: Any) -> PredicateFn:
    """Checks if the field's own list/set/str contains `x`."""
    return _safe(lambda v: v is not None and _member(x, v))


def all_(*xs: Any) -> PredicateFn:
    """Checks if every one of `xs` is contained in the field value."""
    return _safe(lambda v: v is not None and all(_member(x, v) for x in xs))


def regex(pattern: str | re.Pattern[str], flags: int = 0) -> PredicateFn:
    compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)
    return lambda v: isinstance(v, str) and compiled.search(v) is not None


# --- logical ----------------------------------------------------------------


def and_(*predicates: PredicateFn) -> PredicateFn:
    return lambda v: all(p(v) for p in predicates)


def or_(*predicates: PredicateFn) -> PredicateFn:
    return lambda v: any(p(v) for p in predicates)


def not_(predicate: PredicateFn) -> PredicateFn:
    return lambda v: not predicate(v)


def nor(*predicates: PredicateFn) -> PredicateFn:
    return lambda v: not any(p(v) for p in predicates)


# --- arrays -----------------------------------------------------------------


def push(*xs: Any) -> UpdaterFn:
    """Append values to the end of a list (a missing field starts a new list)."""

    def updater(src: list[Any] | None) -> list[Any]:
        if src is None:
            return list(xs)
        src.extend(xs)
        return src

    return updater


def pop() -> UpdaterFn:
    """Remove the last element of a list."""

    def updater(src: list[Any]) -> list[Any]:
        if src:
            src.pop()
        return src

    return updater


def shift() -> UpdaterFn:
    """Remove the first element of a list."""

    def updater(src: list[Any]) -> list[Any]:
        if src:
            del src[0]
        return src

    return updater


def unshift(*xs: Any) -> UpdaterFn:
    """Insert values at the front of a list, keeping their order."""

    def updater(src: list[Any] | None) -> list[Any]:
        if src is None:
            return list(xs)
        src[:0] = xs
        return src

    return updater


# --- arithmetic -------------------------------------------------------------


def _operand(v: Any) -> Any:
    # a missing field counts as 0
    return 0 if v is None else v


def inc(x: float) -> UpdaterFn:
    return lambda v: _operand(v) + x


def dec(x: float) -> UpdaterFn:
    return lambda v: _operand(v) - x


def mul(x: float) -> UpdaterFn:
    return lambda v: _operand(v) * x


def div(x: float) -> UpdaterFn:
    # fail when the update is built, before any document is touched
    if x == 0:
        raise ZeroDivisionError("div() by zero")
    return lambda v: _operand(v) / x


def mod(x: float) -> UpdaterFn:
    if x == 0:
        raise ZeroDivisionError("mod() by zero")
    return lambda v: _operand(v) % x


# --- strings ----------------------------------------------------------------


def replace(pattern: str | re.Pattern[str], replacement: str, count: int = 1) -> UpdaterFn:
    """
    Replace the first occurrence of `pattern` in a string field. Pass `count`
    to replace more, `count=0` replaces every occurrence.

    A plain string pattern is matched literally, a compiled pattern goes through re.sub.
    """
    if isinstance(pattern, re.Pattern):
        return lambda v: pattern.sub(replacement, v, count=count)
    return lambda v: v.replace(pattern, replacement, count if count > 0 else -1)


__all__ = [
    "between",
    "gt",
    "gte",
    "lt",
    "lte",
    "eq",
    "neq",
    "in_",
    "not_in",
    "contains",
    "all_",
    "regex",
    "and_",
    "or_",
    "not_",
    "nor",
    "push",
    "pop",
    "shift",
    "unshift",
    "inc",
    "dec",
    "mul",
    "div",
    "mod",
    "replace",
]
