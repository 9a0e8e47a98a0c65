from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Iterator

from .ids import ObjectId

TYPE_KEY = "$oid"
VALUE_KEY = "$ov"
ID_FIELD = "_id"

_SCALARS = (str, int, float, bool, type(None))
_EPOCH = datetime(1970, 1, 1)
_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Transformer:
    """
    Bidirectional codec between a non-JSON type and a JSON-representable surrogate.

    A value is claimed when its exact runtime type is `type` and `claims` (if set)
    accepts it. `tag` is what ends up in the "$oid" field on disk.
    """

    type: type
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]
    tag: str = ""
    claims: Callable[[Any], bool] | None = None

    def __post_init__(self) -> None:
        if not self.tag:
            object.__setattr__(self, "tag", self.type.__name__)

    def matches(self, value: Any) -> bool:
        if type(value) is not self.type:
            return False
        return self.claims is None or bool(self.claims(value))


class TransformerRegistry:
    """
    Ordered, immutable collection of transformers searched by tag or by value.
    """

    def __init__(self, transformers: Iterable[Transformer] = ()):
        self._transformers: tuple[Transformer, ...] = tuple(transformers)
        self._by_tag: dict[str, Transformer] = {}
        for t in self._transformers:
            self._by_tag.setdefault(t.tag, t)

    def for_value(self, value: Any) -> Transformer | None:
        for t in self._transformers:
            if t.matches(value):
                return t
        return None

    def for_tag(self, tag: Any) -> Transformer | None:
        if not isinstance(tag, str):
            return None
        return self._by_tag.get(tag)

    def extend(self, *transformers: Transformer) -> "TransformerRegistry":
        return TransformerRegistry(self._transformers + tuple(transformers))

    def __iter__(self) -> Iterator[Transformer]:
        return iter(self._transformers)

    def __len__(self) -> int:
        return len(self._transformers)

    def __repr__(self) -> str:
        return f"TransformerRegistry({[t.tag for t in self._transformers]!r})"


def _sorted_members(values: Iterable[Any]) -> list[Any]:
    members = list(values)
    try:
        return sorted(members)
    except TypeError:
        return members


def _naive_to_micros(value: datetime) -> int:
    # naive wall time is read as UTC so the surrogate does not depend on the host timezone
    return (value - _EPOCH) // timedelta(microseconds=1)


def _aware_to_micros(value: datetime) -> int:
    return (value - _EPOCH_UTC) // timedelta(microseconds=1)


def _time_to_micros(value: time) -> int:
    return ((value.hour * 60 + value.minute) * 60 + value.second) * 1_000_000 + value.microsecond


def _micros_to_time(value: int) -> time:
    seconds, micros = divmod(value, 1_000_000)
    minutes, second = divmod(seconds, 60)
    hour, minute = divmod(minutes, 60)
    return time(hour, minute, second, micros)


def _has_non_str_key(value: dict) -> bool:
    return any(not isinstance(k, str) for k in value)


OBJECT_ID_TRANSFORMER = Transformer(ObjectId, str, ObjectId, tag="ObjectId")

DATETIME_TRANSFORMER = Transformer(
    datetime,
    _naive_to_micros,
    lambda v: _EPOCH + timedelta(microseconds=v),
    tag="datetime",
    claims=lambda v: v.tzinfo is None,
)

AWARE_DATETIME_TRANSFORMER = Transformer(
    datetime,
    _aware_to_micros,
    lambda v: _EPOCH_UTC + timedelta(microseconds=v),
    tag="datetime.utc",
    claims=lambda v: v.tzinfo is not None,
)

DATE_TRANSFORMER = Transformer(date, date.toordinal, date.fromordinal, tag="date")

TIME_TRANSFORMER = Transformer(
    time,
    _time_to_micros,
    _micros_to_time,
    tag="time",
    claims=lambda v: v.tzinfo is None,
)

TIMEDELTA_TRANSFORMER = Transformer(
    timedelta,
    lambda v: v // timedelta(microseconds=1),
    lambda v: timedelta(microseconds=v),
)

UUID_TRANSFORMER = Transformer(uuid.UUID, str, uuid.UUID, tag="uuid")

# string surrogate keeps the exact digits
DECIMAL_TRANSFORMER = Transformer(Decimal, str, Decimal, tag="decimal")

SET_TRANSFORMER = Transformer(set, _sorted_members, set, tag="set")

FROZENSET_TRANSFORMER = Transformer(frozenset, _sorted_members, frozenset, tag="frozenset")

MAP_TRANSFORMER = Transformer(
    dict,
    lambda v: [[k, item] for k, item in v.items()],
    lambda v: {k: item for k, item in v},
    tag="map",
    claims=_has_non_str_key,
)

BYTES_TRANSFORMER = Transformer(
    bytes,
    lambda v: base64.b64encode(v).decode("ascii"),
    lambda v: base64.b64decode(v.encode("ascii")),
    tag="bytes",
)

DEFAULT_TRANSFORMERS: tuple[Transformer, ...] = (
    OBJECT_ID_TRANSFORMER,
    DATETIME_TRANSFORMER,
    AWARE_DATETIME_TRANSFORMER,
    DATE_TRANSFORMER,
    TIME_TRANSFORMER,
    TIMEDELTA_TRANSFORMER,
    UUID_TRANSFORMER,
    DECIMAL_TRANSFORMER,
    SET_TRANSFORMER,
    FROZENSET_TRANSFORMER,
    MAP_TRANSFORMER,
    BYTES_TRANSFORMER,
)

_DEFAULT_REGISTRY = TransformerRegistry(DEFAULT_TRANSFORMERS)


def default_registry() -> TransformerRegistry:
    return _DEFAULT_REGISTRY


def encode_tree(value: Any, registry: TransformerRegistry, key: str | None = None) -> Any:
    """
    Convert a document tree into JSON-representable values.

    Raises TypeError for values that are neither JSON-native nor claimed by a
    transformer.
    """
    if key == ID_FIELD and isinstance(value, ObjectId):
        return str(value)
    if type(value) in _SCALARS:
        return value

    transformer = registry.for_value(value)
    if transformer is not None:
        return {TYPE_KEY: transformer.tag, VALUE_KEY: encode_tree(transformer.encode(value), registry)}

    # enum members are stored by value and come back as that value
    if isinstance(value, Enum):
        return encode_tree(value.value, registry, key)

    if isinstance(value, dict):
        return {k: encode_tree(v, registry, k) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_tree(v, registry) for v in value]
    # other str/int/float subclasses serialize as their base value
    if isinstance(value, _SCALARS):
        return value

    raise TypeError(f"No transformer registered for type {type(value).__name__}")


def decode_object(obj: dict[str, Any], registry: TransformerRegistry) -> Any:
    """
    `json.loads` object hook: runs bottom-up, so nested surrogates are already decoded.
    """
    raw_id = obj.get(ID_FIELD)
    if isinstance(raw_id, str) and ObjectId.is_valid(raw_id):
        obj[ID_FIELD] = ObjectId(raw_id)

    if TYPE_KEY in obj and VALUE_KEY in obj:
        transformer = registry.for_tag(obj[TYPE_KEY])
        if transformer is not None:
            return transformer.decode(obj[VALUE_KEY])
    return obj
