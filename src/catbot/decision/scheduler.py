"""
Timer abstraction for maneuvers.

The state machine never sleeps; it asks a Scheduler to call it back
after each step's duration. The asyncio implementation runs on the
robot; tests drive a fake one that advances virtual time.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable


class Scheduler(ABC):
    """Source of time and delayed callbacks."""

    @abstractmethod
    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> Any:
        """Run callback(*args) after delay seconds. Returns a cancellable handle."""
        ...


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[..., Any], *args) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback, *args)
