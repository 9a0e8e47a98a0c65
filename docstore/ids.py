from __future__ import annotations

import re
import uuid
from typing import Any

from .errors import InvalidIdentifierError

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


class ObjectId:
    """
    Opaque document identifier backed by a random UUID4.

    `ObjectId()` generates a new id, `ObjectId(text)` parses an existing one and
    raises InvalidIdentifierError for anything that is not an RFC 4122 UUID.
    """

    __slots__ = ("_id",)

    def __init__(self, id: str | None = None):
        if id is None:
            self._id = str(uuid.uuid4())
            return
        if not ObjectId.is_valid(id):
            raise InvalidIdentifierError(id)
        self._id = id.lower()

    @staticmethod
    def is_valid(value: Any) -> bool:
        return isinstance(value, str) and _UUID_RE.fullmatch(value) is not None

    @classmethod
    def coerce(cls, value: Any) -> "ObjectId":
        if isinstance(value, ObjectId):
            return value
        if not cls.is_valid(value):
            raise InvalidIdentifierError(value)
        return cls(value)

    @property
    def id(self) -> str:
        return self._id

    def __str__(self) -> str:
        return self._id

    def __repr__(self) -> str:
        return f"ObjectId({self._id!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObjectId):
            return self._id == other._id
        if isinstance(other, str):
            return self._id == other.lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._id)

    def __copy__(self) -> "ObjectId":
        return self

    def __deepcopy__(self, memo: dict) -> "ObjectId":
        return self
