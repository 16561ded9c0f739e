from __future__ import annotations

import asyncio
import logging
from typing import Callable, Hashable, Optional, Protocol

logger = logging.getLogger(__name__)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio loop.

    The loop is looked up on every call so the engine can be built before
    the UI loop starts, as long as callbacks are only requested from inside it.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class TaskSet:
    """Cancellable delayed callbacks keyed by id."""

    def __init__(self, scheduler: Scheduler) -> None:
        self.scheduler = scheduler
        self._handles: dict[Hashable, Handle] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def schedule(self, key: Hashable, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` after ``delay``; rescheduling a key replaces the old callback."""
        self.cancel(key)

        def fire() -> None:
            self._handles.pop(key, None)
            callback()

        self._handles[key] = self.scheduler.call_later(delay, fire)

    def cancel(self, key: Hashable) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for key in list(self._handles):
            self.cancel(key)
        logger.debug("Cancelled all scheduled callbacks")
