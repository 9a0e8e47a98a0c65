from __future__ import annotations

import json
import logging
import os
from typing import Any, Iterable

from ..errors import DocStoreError, PersistenceReadError, PersistenceWriteError
from ..transformers import Transformer, TransformerRegistry, decode_object, default_registry, encode_tree
from ..types import StoreData
from .interfaces import DBPersistence, SaveLocation
from .save_location import FileSaveLocation

logger = logging.getLogger(__name__)


class JsonFile(DBPersistence):
    """
    Persists the store as one JSON document.

    Values claimed by a transformer are written as {"$oid": tag, "$ov": surrogate}
    and decoded back on read; unknown tags pass through unchanged.

    On-disk shape:
      { "<model>": { "<document id>": { ...document fields... } } }
    """

    def __init__(
        self,
        location: SaveLocation | str | os.PathLike[str],
        *,
        transformers: TransformerRegistry | Iterable[Transformer] | None = None,
        indent: int | None = None,
        create_if_missing: bool = True,
    ):
        if isinstance(location, (str, os.PathLike)):
            location = FileSaveLocation(location, create_if_missing=create_if_missing)
        self._location = location

        if transformers is None:
            transformers = default_registry()
        elif not isinstance(transformers, TransformerRegistry):
            transformers = TransformerRegistry(transformers)
        self._registry = transformers
        self._indent = indent

    @property
    def location(self) -> SaveLocation:
        return self._location

    @property
    def transformers(self) -> TransformerRegistry:
        return self._registry

    def dumps(self, data: StoreData) -> str:
        payload = encode_tree(data, self._registry)
        return json.dumps(payload, indent=self._indent, ensure_ascii=False)

    def loads(self, text: str) -> StoreData:
        if not text.strip():
            return {}
        data: Any = json.loads(text, object_hook=lambda obj: decode_object(obj, self._registry))
        if not isinstance(data, dict):
            raise PersistenceReadError(f"Expected a JSON object at the top level, got {type(data).__name__}")
        return data

    async def read(self) -> StoreData:
        text = await self._location.load()
        try:
            return self.loads(text)
        except PersistenceReadError:
            raise
        except (ValueError, TypeError, KeyError, DocStoreError) as e:
            # json.JSONDecodeError is a ValueError; transformer decode failures land here too
            raise PersistenceReadError(f"Corrupt store data in {self._location!r}: {e}") from e

    async def write(self, data: StoreData) -> None:
        # encode before the first await so the snapshot is consistent
        try:
            text = self.dumps(data)
        except (TypeError, ValueError) as e:
            raise PersistenceWriteError(f"Failed to encode store: {e}") from e
        logger.debug("JSON FILE WRITE: %d bytes to %r", len(text), self._location)
        await self._location.save(text)
