from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path

import pytest

from docstore import (
    FileSaveLocation,
    JsonFile,
    Memory,
    ObjectId,
    PersistenceReadError,
    PersistenceWriteError,
    Transformer,
    default_registry,
)


class StringLocation:
    """Custom SaveLocation keeping the text in memory."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.saves = 0

    async def save(self, text: str) -> None:
        self.saves += 1
        self.text = text

    async def load(self) -> str:
        return self.text


class Money:
    def __init__(self, cents: int):
        self.cents = cents

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Money) and other.cents == self.cents


def test_file_location_creates_missing_file(tmp_path: Path):
    path = tmp_path / "nested" / "db.json"
    loc = FileSaveLocation(path)
    assert path.exists()

    async def _run():
        assert await loc.load() == ""
        await loc.save('{"a": {}}')
        assert await loc.load() == '{"a": {}}'

    asyncio.run(_run())
    assert not path.with_suffix(".json.tmp").exists()


def test_file_location_without_create_requires_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        FileSaveLocation(tmp_path / "missing.json", create_if_missing=False)


def test_json_file_roundtrip_with_transformers(tmp_path: Path):
    path = tmp_path / "db.json"
    store = JsonFile(path)
    oid = ObjectId()
    data = {
        "user": {
            oid.id: {
                "name": "John",
                "joined": datetime(2024, 1, 2, 3, 4, 5),
                "tags": {"b", "a"},
                "avatar": b"\x89PNG",
                "friend": oid,
            }
        }
    }

    async def _run():
        await store.write(data)
        return await store.read()

    loaded = asyncio.run(_run())
    assert loaded == data

    raw = json.loads(path.read_text(encoding="utf-8"))
    body = raw["user"][oid.id]
    assert "_id" not in body
    assert body["tags"] == {"$oid": "set", "$ov": ["a", "b"]}
    assert body["joined"]["$oid"] == "datetime"
    assert isinstance(body["joined"]["$ov"], int)


def test_json_file_empty_file_reads_as_empty_store(tmp_path: Path):
    store = JsonFile(tmp_path / "db.json")
    assert asyncio.run(store.read()) == {}


def test_json_file_corrupt_text_raises_read_error():
    store = JsonFile(StringLocation("{not json"))
    with pytest.raises(PersistenceReadError):
        asyncio.run(store.read())


def test_json_file_non_object_top_level_raises_read_error():
    store = JsonFile(StringLocation("[1, 2, 3]"))
    with pytest.raises(PersistenceReadError):
        asyncio.run(store.read())


def test_json_file_unencodable_value_raises_write_error():
    store = JsonFile(StringLocation())
    with pytest.raises(PersistenceWriteError):
        asyncio.run(store.write({"user": {str(ObjectId()): {"money": Money(5)}}}))


def test_json_file_custom_transformers():
    money = Transformer(Money, lambda m: m.cents, Money)
    location = StringLocation()
    store = JsonFile(location, transformers=default_registry().extend(money))
    data = {"wallet": {str(ObjectId()): {"balance": Money(1250)}}}

    async def _run():
        await store.write(data)
        return await store.read()

    assert asyncio.run(_run()) == data
    assert '"$oid": "Money"' in location.text


def test_json_file_writes_are_deterministic():
    location = StringLocation()
    store = JsonFile(location)
    data = {"user": {str(ObjectId()): {"tags": {"z", "y", "x"}, "n": 1}}}

    async def _run():
        await store.write(data)
        first = location.text
        await store.write(data)
        return first, location.text

    first, second = asyncio.run(_run())
    assert first == second


def test_json_file_indent_option():
    location = StringLocation()
    asyncio.run(JsonFile(location, indent=2).write({"user": {}}))
    assert location.text == '{\n  "user": {}\n}'


def test_memory_persistence_is_a_noop():
    async def _run():
        mem = Memory()
        await mem.write({"user": {"x": {}}})
        return await mem.read()

    assert asyncio.run(_run()) == {}
