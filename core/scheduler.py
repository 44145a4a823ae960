"""Timer primitives for the engine.

Every deferred action (retries, self-heal refreshes, polling, health checks,
catalog refreshes after a preset save) goes through a Scheduler so that it has
a name and a cancellable handle instead of being a bare loop callback.
"""

import asyncio
import logging
from typing import Callable

_LOGGER = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for one pending timer callback."""

    def __init__(self, name: str, delay: float, handle: asyncio.TimerHandle | None = None):
        self.name = name
        self.delay = delay
        self._handle = handle
        self._cancelled = False
        self._done = False

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
        self._cancelled = True

    def _mark_done(self):
        self._done = True


class Scheduler:
    """Named, cancellable timers on an asyncio event loop.

    Scheduling a name that already has a pending task replaces it, so at most
    one task per name is ever pending. Unnamed work should pass a unique name.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop
        self._tasks: dict[str, ScheduledTask] = {}

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, name: str, delay: float, callback: Callable, *args) -> ScheduledTask:
        """Run `callback(*args)` after `delay` seconds, replacing any pending `name`."""
        self.cancel(name)

        task = ScheduledTask(name, delay)

        def _run():
            task._mark_done()
            if self._tasks.get(name) is task:
                del self._tasks[name]
            try:
                callback(*args)
            except Exception:
                _LOGGER.exception("Scheduled task '%s' failed", name)

        task._handle = self.loop.call_later(delay, _run)
        self._tasks[name] = task
        return task

    def cancel(self, name: str) -> bool:
        task = self._tasks.pop(name, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self):
        for task in list(self._tasks.values()):
            task.cancel()
        self._tasks.clear()

    def pending(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and task.active

    def pending_names(self) -> list[str]:
        return [name for name, task in self._tasks.items() if task.active]
