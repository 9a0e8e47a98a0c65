"""
Embedded document store: schema-validated collections of JSON-like documents
kept in memory and written back to a pluggable persistence medium.

Quick start:
    from pydantic import BaseModel, Field
    from docstore import DocStore, ops

    class User(BaseModel):
        name: str
        age: int
        hobbies: list[str] = Field(default_factory=list)

    async with DocStore({"user": User}, storage="db.json") as db:
        users = db.collection("user")
        john = await users.create({"name": "John", "age": 20})
        adults = await users.find_many({"age": ops.gte(18)})
        await users.update_by_id(john["_id"], {"age": ops.inc(1)})
"""

from __future__ import annotations

from . import ops
from .collection import Collection
from .compare import deep_equal
from .errors import (
    DocStoreError,
    DocumentValidationError,
    InvalidIdentifierError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    StoreClosedError,
    UnknownModelError,
)
from .ids import ObjectId
from .manager import DocStore, connect
from .persistence import DBPersistence, FileSaveLocation, JsonFile, Memory, SaveLocation
from .query import matches
from .scheduler import CancelHandle, LoopScheduler, Scheduler
from .settings import Settings, get_settings
from .transformers import DEFAULT_TRANSFORMERS, Transformer, TransformerRegistry, default_registry
from .tree import Literal, Nested, Predicate, Updater
from .types import Document, StoreData
from .update import apply_update
from .validation import FunctionValidator, PydanticValidator, Validator, as_validator

__all__ = [
    # Main API
    "DocStore",
    "Collection",
    "connect",
    "ops",
    # Engines
    "matches",
    "apply_update",
    "deep_equal",
    "Literal",
    "Nested",
    "Predicate",
    "Updater",
    # Identifiers
    "ObjectId",
    # Persistence
    "DBPersistence",
    "SaveLocation",
    "FileSaveLocation",
    "JsonFile",
    "Memory",
    # Serialization
    "Transformer",
    "TransformerRegistry",
    "DEFAULT_TRANSFORMERS",
    "default_registry",
    # Validation
    "Validator",
    "PydanticValidator",
    "FunctionValidator",
    "as_validator",
    # Scheduling
    "Scheduler",
    "CancelHandle",
    "LoopScheduler",
    # Configuration
    "Settings",
    "get_settings",
    # Types
    "Document",
    "StoreData",
    # Exceptions
    "DocStoreError",
    "DocumentValidationError",
    "InvalidIdentifierError",
    "UnknownModelError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    "StoreClosedError",
]

__version__ = "0.1.0"
