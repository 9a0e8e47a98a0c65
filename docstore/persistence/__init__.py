from __future__ import annotations

from .interfaces import DBPersistence, SaveLocation
from .json_file import JsonFile
from .memory import Memory
from .save_location import FileSaveLocation

__all__ = [
    "DBPersistence",
    "SaveLocation",
    "FileSaveLocation",
    "JsonFile",
    "Memory",
]
