from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine

import structlog

log = structlog.get_logger()


class TickDriver:
    """
    Arms one-shot timers and runs ticks as tasks on an asyncio loop.

    The loop is resolved lazily: commands may be issued before a loop runs,
    as long as the first timer is armed from inside one (or a loop was given).
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        # strong refs, the loop itself only keeps weak ones
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def arm(self, delay: float, fire: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, fire)

    def cancel(self, handle: asyncio.TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def spawn(self, coro: Coroutine[Any, Any, None], *, name: str | None = None) -> asyncio.Task[None]:
        task = self.loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "engine.tick_crashed",
                task=task.get_name(),
                error_type=type(exc).__name__,
                exc_info=exc,
            )
