from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .ids import ObjectId
from .query import matches
from .transformers import ID_FIELD
from .tree import Nested, Node, compile_query, compile_update
from .types import Document
from .update import apply_update

if TYPE_CHECKING:
    from .manager import DocStore


class Collection:
    """
    Query/update handle for one model. Obtain it with `DocStore.collection(name)`.

    Every operation waits for the store to finish loading, then works on the
    in-memory collection without suspending. Returned documents are copies
    carrying their `_id`; mutate the store through update* instead.
    """

    def __init__(self, store: "DocStore", model: str):
        self._store = store
        self._model = model

    @property
    def name(self) -> str:
        return self._model

    @property
    def _docs(self) -> dict[str, Document]:
        return self._store._collection_data(self._model)

    def _view(self, key: str) -> Document:
        return {ID_FIELD: ObjectId(key), **copy.deepcopy(self._docs[key])}

    def _matching_ids(self, where: Any, limit: int | None = None) -> list[str]:
        node: Node = compile_query(where)
        # whole-document predicates and "_id" queries see the identifier too
        with_id = not isinstance(node, Nested) or ID_FIELD in node.fields
        found: list[str] = []
        for key, body in self._docs.items():
            candidate = {ID_FIELD: ObjectId(key), **body} if with_id else body
            if matches(candidate, node):
                found.append(key)
                if limit is not None and len(found) >= limit:
                    break
        return found

    def _apply(self, keys: Iterable[str], to: Any) -> None:
        node = compile_update(to)
        docs = self._docs
        staged: dict[str, Document] = {}
        for key in keys:
            body = copy.deepcopy(docs[key])
            apply_update(body, node)
            body.pop(ID_FIELD, None)
            self._store._check_encodable(self._model, body)
            staged[key] = body
        # nothing is written back unless every document updated cleanly
        docs.update(staged)

    # create

    async def create(self, data: Mapping[str, Any]) -> Document:
        """
        Validate `data` against the model and insert it under a fresh identifier.

        Raises DocumentValidationError (nothing is stored) if the validator rejects it
        or the result holds a value the storage cannot serialize.
        """
        await self._store.ready()
        body = dict(data)
        body.pop(ID_FIELD, None)
        normalized = self._store.validator(self._model).validate(body)
        normalized.pop(ID_FIELD, None)
        self._store._check_encodable(self._model, normalized)

        docs = self._docs
        oid = ObjectId()
        while oid.id in docs:
            oid = ObjectId()
        docs[oid.id] = copy.deepcopy(normalized)

        self._store.request_flush()
        return self._view(oid.id)

    # read

    async def find_by_id(self, id: ObjectId | str) -> Document | None:
        key = ObjectId.coerce(id).id
        await self._store.ready()
        if key not in self._docs:
            return None
        return self._view(key)

    async def find(self, where: Any = None) -> Document | None:
        await self._store.ready()
        ids = self._matching_ids(where, limit=1)
        return self._view(ids[0]) if ids else None

    async def find_many(self, where: Any = None) -> list[Document]:
        await self._store.ready()
        return [self._view(key) for key in self._matching_ids(where)]

    async def count(self, where: Any = None) -> int:
        await self._store.ready()
        if where is None:
            return len(self._docs)
        return len(self._matching_ids(where))

    # update

    async def update_by_id(self, id: ObjectId | str, to: Any) -> Document | None:
        key = ObjectId.coerce(id).id
        await self._store.ready()
        if key not in self._docs:
            return None
        self._apply([key], to)
        self._store.request_flush()
        return self._view(key)

    async def update(self, where: Any, to: Any) -> Document | None:
        await self._store.ready()
        ids = self._matching_ids(where, limit=1)
        if not ids:
            return None
        self._apply(ids, to)
        self._store.request_flush()
        return self._view(ids[0])

    async def update_many(self, where: Any, to: Any) -> list[Document]:
        await self._store.ready()
        ids = self._matching_ids(where)
        if not ids:
            return []
        self._apply(ids, to)
        self._store.request_flush()
        return [self._view(key) for key in ids]

    # delete

    async def delete_by_id(self, id: ObjectId | str) -> bool:
        key = ObjectId.coerce(id).id
        await self._store.ready()
        if self._docs.pop(key, None) is None:
            return False
        self._store.request_flush()
        return True

    async def delete(self, where: Any) -> bool:
        await self._store.ready()
        ids = self._matching_ids(where, limit=1)
        if not ids:
            return False
        del self._docs[ids[0]]
        self._store.request_flush()
        return True

    async def delete_many(self, where: Any = None) -> int:
        await self._store.ready()
        ids = self._matching_ids(where)
        if not ids:
            return 0
        docs = self._docs
        for key in ids:
            del docs[key]
        self._store.request_flush()
        return len(ids)

    def __repr__(self) -> str:
        return f"Collection({self._model!r})"
