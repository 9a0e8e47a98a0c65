from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Mapping

from .collection import Collection
from .errors import DocumentValidationError, StoreClosedError, UnknownModelError
from .ids import ObjectId
from .persistence import DBPersistence, JsonFile, Memory
from .scheduler import CancelHandle, LoopScheduler, Scheduler
from .settings import Settings, get_settings
from .transformers import ID_FIELD, TransformerRegistry, default_registry, encode_tree
from .types import Document, StoreData
from .validation import Validator, as_validator

logger = logging.getLogger(__name__)


def _resolve_storage(storage: DBPersistence | str | os.PathLike[str] | None, settings: Settings) -> DBPersistence:
    if storage is None:
        if not settings.storage_path:
            return Memory()
        storage = settings.storage_path
    if isinstance(storage, (str, os.PathLike)):
        return JsonFile(storage, indent=settings.json_indent, create_if_missing=settings.create_if_missing)
    return storage


def _clean_collection(docs: Any) -> dict[str, Document] | None:
    """
    Return the collection with normalized keys, or None if its shape is unusable.
    """
    if not isinstance(docs, dict):
        return None
    cleaned: dict[str, Document] = {}
    for key, body in docs.items():
        if not ObjectId.is_valid(key) or not isinstance(body, dict):
            return None
        body.pop(ID_FIELD, None)
        cleaned[key.lower()] = body
    return cleaned


class DocStore:
    """
    Owns every collection, the initial load and the debounced write-back.

    Example:
        db = DocStore({"user": User}, storage="db.json")
        users = db.collection("user")
        doc = await users.create({"name": "John", "age": 20})
        await db.disconnect()

    The backing store is read once; operations issued before the load finishes
    wait for it. Mutations call request_flush(), so a burst of changes inside
    one `save_interval` window results in a single write.
    """

    def __init__(
        self,
        models: Mapping[str, Any],
        *,
        storage: DBPersistence | str | os.PathLike[str] | None = None,
        save_interval: float | None = None,
        scheduler: Scheduler | None = None,
        settings: Settings | None = None,
    ):
        if settings is None:
            settings = get_settings()
        self._validators: dict[str, Validator] = {name: as_validator(v, name=name) for name, v in models.items()}
        self._storage = _resolve_storage(storage, settings)
        self._save_interval = settings.save_interval if save_interval is None else float(save_interval)
        self._scheduler: Scheduler = scheduler if scheduler is not None else LoopScheduler()

        self._data: StoreData = {}
        self._collections: dict[str, Collection] = {}
        self._timer: CancelHandle | None = None
        self._flush_task: asyncio.Task[None] | None = None
        # one write at a time, each one snapshotting the latest data
        self._write_lock = asyncio.Lock()
        self._load_task: asyncio.Task[None] | None = None
        self._closed = False

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # no loop yet: the load starts on the first ready()
            pass
        else:
            self._start_load()

    # introspection

    @property
    def storage(self) -> DBPersistence:
        return self._storage

    @property
    def save_interval(self) -> float:
        return self._save_interval

    @property
    def model_names(self) -> list[str]:
        return list(self._validators)

    @property
    def data(self) -> StoreData:
        """The live in-memory store. Treat as read-only."""
        return self._data

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def flush_pending(self) -> bool:
        return self._timer is not None

    @property
    def transformers(self) -> TransformerRegistry:
        registry = getattr(self._storage, "transformers", None)
        return registry if isinstance(registry, TransformerRegistry) else default_registry()

    def validator(self, model: str) -> Validator:
        try:
            return self._validators[model]
        except KeyError:
            raise UnknownModelError(model) from None

    def collection(self, model: str) -> Collection:
        if model not in self._validators:
            raise UnknownModelError(model)
        handle = self._collections.get(model)
        if handle is None:
            handle = Collection(self, model)
            self._collections[model] = handle
        return handle

    def _collection_data(self, model: str) -> dict[str, Document]:
        return self._data.setdefault(model, {})

    def _check_encodable(self, model: str, document: Document) -> None:
        try:
            encode_tree(document, self.transformers)
        except (TypeError, ValueError) as e:
            raise DocumentValidationError(model, errors=[{"type": "encoding_error", "msg": str(e)}]) from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreClosedError()

    # load

    def _start_load(self) -> None:
        self._load_task = asyncio.get_running_loop().create_task(self._load())

    async def ready(self) -> None:
        """
        Wait until the initial load has finished. Data written before this
        resolves would race the load and be lost, so every operation awaits it.
        """
        self._ensure_open()
        if self._load_task is None:
            self._start_load()
        assert self._load_task is not None
        await asyncio.shield(self._load_task)

    async def _load(self) -> None:
        needs_flush = False
        try:
            loaded: Any = await self._storage.read()
        except Exception as e:
            logger.warning("STORE LOAD: failed to read %r, starting empty: %r", self._storage, e)
            loaded = {}
            needs_flush = True

        if not isinstance(loaded, dict):
            logger.warning("STORE LOAD: unexpected store shape in %r, starting empty", self._storage)
            loaded = {}
            needs_flush = True

        data: StoreData = {}
        for name, docs in loaded.items():
            if name not in self._validators:
                # unknown models are kept and written back untouched
                data[name] = docs
                continue
            cleaned = _clean_collection(docs)
            if cleaned is None:
                logger.warning("STORE LOAD: collection %r is malformed, resetting it to empty", name)
                cleaned = {}
                needs_flush = True
            data[name] = cleaned

        for name in self._validators:
            if name not in data:
                logger.info("STORE LOAD: creating empty collection %r", name)
                data[name] = {}
                needs_flush = True

        self._data = data
        if needs_flush and not self._closed:
            self.request_flush()

    # flush

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def request_flush(self) -> None:
        """
        Schedule a debounced write-back. A new request cancels the previous
        timer, so only the latest deadline counts.
        """
        self._ensure_open()
        self._cancel_timer()
        self._timer = self._scheduler.after(self._save_interval, self._on_timer)
        logger.debug("STORE FLUSH: scheduled in %.3fs", self._save_interval)

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._write())
        self._flush_task = task
        task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: asyncio.Task[None]) -> None:
        if self._flush_task is task:
            self._flush_task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("STORE FLUSH: debounced write to %r failed", self._storage, exc_info=exc)

    async def _write(self) -> None:
        async with self._write_lock:
            await self._storage.write(self._data)
        logger.debug("STORE FLUSH: wrote %d collection(s)", len(self._data))

    async def flush_now(self) -> None:
        """
        Persist the current store immediately, cancelling any pending debounced
        flush. A debounced write already in progress finishes first, so this
        write always lands last. PersistenceWriteError propagates to the caller.
        """
        await self.ready()
        self._cancel_timer()
        await self._write()

    async def disconnect(self) -> None:
        """
        Cancel the pending flush, write the store one last time and close it.
        Any later operation raises StoreClosedError. Calling it twice is a no-op.
        """
        if self._closed:
            return
        await self.ready()
        self._cancel_timer()
        pending = self._flush_task
        if pending is not None and not pending.done():
            # its failure is logged by _on_flush_done
            await asyncio.wait({pending})
        await self._write()
        self._closed = True
        logger.debug("STORE: disconnected from %r", self._storage)

    async def __aenter__(self) -> "DocStore":
        await self.ready()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def __repr__(self) -> str:
        return f"DocStore(models={self.model_names!r}, storage={self._storage!r})"


async def connect(models: Mapping[str, Any], **options: Any) -> DocStore:
    """
    Create a DocStore and wait for its initial load.
    """
    store = DocStore(models, **options)
    await store.ready()
    return store
