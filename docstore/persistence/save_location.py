from __future__ import annotations

import asyncio
import os
import threading
from pathlib import Path

from ..errors import PersistenceReadError, PersistenceWriteError
from ..json_store import atomic_write_text, read_text, touch
from .interfaces import SaveLocation


class _PathLocks:
    """
    One lock per resolved file path, shared by every FileSaveLocation in the process.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


_PATH_LOCKS = _PathLocks()


class FileSaveLocation(SaveLocation):
    """
    Stores the serialized store in a single UTF-8 file.

    The file (and its parent directories) is created when missing unless
    `create_if_missing` is False, in which case FileNotFoundError is raised.
    Blocking file I/O runs in a worker thread.
    """

    def __init__(self, path: str | os.PathLike[str], *, create_if_missing: bool = True):
        self._path = Path(path)
        if not self._path.exists():
            if not create_if_missing:
                raise FileNotFoundError(f"File {self._path} does not exist")
            touch(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _load_sync(self) -> str:
        with _PATH_LOCKS.lock_for(self._path):
            return read_text(self._path)

    def _save_sync(self, text: str) -> None:
        with _PATH_LOCKS.lock_for(self._path):
            atomic_write_text(self._path, text)

    async def load(self) -> str:
        try:
            return await asyncio.to_thread(self._load_sync)
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceReadError(f"Failed to read {self._path}: {e}") from e

    async def save(self, text: str) -> None:
        try:
            await asyncio.to_thread(self._save_sync, text)
        except OSError as e:
            raise PersistenceWriteError(f"Failed to write {self._path}: {e}") from e

    def __repr__(self) -> str:
        return f"FileSaveLocation({str(self._path)!r})"
