from __future__ import annotations

from ..types import StoreData
from .interfaces import DBPersistence


class Memory(DBPersistence):
    """
    Keeps nothing: every start is an empty store and writes are dropped.
    """

    async def read(self) -> StoreData:
        return {}

    async def write(self, data: StoreData) -> None:
        return None
