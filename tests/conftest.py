from __future__ import annotations

import copy
from pathlib import Path
import sys
from typing import Any, Callable

import pytest
from pydantic import BaseModel, Field


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class User(BaseModel):
    name: str = Field(min_length=1)
    age: int
    hobbies: list[str] = Field(default_factory=list)


class Address(BaseModel):
    city: str
    zip: str | None = None


class Person(BaseModel):
    name: str
    address: Address
    tags: set[str] = Field(default_factory=set)


class _Timer:
    def __init__(self, deadline: float, fn: Callable[[], None]):
        self.deadline = deadline
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic stand-in for LoopScheduler: time only moves on advance().
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[_Timer] = []

    def after(self, delay: float, fn: Callable[[], None]) -> _Timer:
        timer = _Timer(self.now + delay, fn)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[_Timer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> int:
        self.now += seconds
        fired = 0
        for timer in list(self.timers):
            if timer.cancelled or timer.deadline > self.now:
                continue
            self.timers.remove(timer)
            timer.fn()
            fired += 1
        return fired


class RecordingPersistence:
    """
    In-memory DBPersistence that keeps every snapshot it was asked to write.
    """

    def __init__(self, initial: Any = None, *, fail_read: Exception | None = None, fail_write: Exception | None = None):
        self.initial = {} if initial is None else initial
        self.fail_read = fail_read
        self.fail_write = fail_write
        self.reads = 0
        self.writes: list[dict[str, Any]] = []

    async def read(self) -> Any:
        self.reads += 1
        if self.fail_read is not None:
            raise self.fail_read
        return self.initial

    async def write(self, data: dict[str, Any]) -> None:
        if self.fail_write is not None:
            raise self.fail_write
        self.writes.append(copy.deepcopy(data))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Keep DOCSTORE_* variables from the developer's shell out of the tests.
    """
    for name in ("DOCSTORE_PATH", "DOCSTORE_SAVE_INTERVAL", "DOCSTORE_CREATE_IF_MISSING", "DOCSTORE_JSON_INDENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def recording() -> RecordingPersistence:
    return RecordingPersistence()


@pytest.fixture
def models() -> dict[str, type[BaseModel]]:
    return {"user": User, "person": Person}
