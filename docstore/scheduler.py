from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class CancelHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def after(self, delay: float, fn: Callable[[], None]) -> CancelHandle:
        """Run `fn` once after `delay` seconds unless the handle is cancelled first."""
        ...


class LoopScheduler(Scheduler):
    """
    Schedules callbacks on the running asyncio event loop.
    """

    def after(self, delay: float, fn: Callable[[], None]) -> CancelHandle:
        return asyncio.get_running_loop().call_later(max(0.0, delay), fn)
