from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..types import StoreData


@runtime_checkable
class SaveLocation(Protocol):
    """
    Raw text boundary, e.g. a file. A custom location can encrypt, compress or
    ship the text elsewhere.
    """

    async def save(self, text: str) -> None:
        ...

    async def load(self) -> str:
        ...


@runtime_checkable
class DBPersistence(Protocol):
    """
    Reads and writes the whole store at once.
    """

    async def read(self) -> StoreData:
        """Return the full store. Raises PersistenceReadError if unreadable."""
        ...

    async def write(self, data: StoreData) -> None:
        """Persist the full store. Raises PersistenceWriteError on rejection; no retry."""
        ...
