"""Sequencing for ``send`` calls and tracking of background saves."""

import asyncio
import contextlib
from typing import Any, Coroutine, Set

import structlog

logger = structlog.get_logger()


class SendQueue:
    """Lets one send run at a time, in arrival order.

    ``asyncio.Lock`` hands the lock over in FIFO order, so queued sends run in
    the order they were called. An uncontended ``acquire`` does not suspend.
    With ``enabled=False`` sends interleave freely at their await points.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.pending = 0
        self._lock = asyncio.Lock()

    @contextlib.asynccontextmanager
    async def acquire(self):
        """Hold the send slot for the duration of the block."""
        self.pending += 1
        try:
            if not self.enabled:
                yield
                return
            if self._lock.locked():
                logger.debug("send_queued", pending=self.pending)
            async with self._lock:
                yield
        finally:
            self.pending -= 1


class BackgroundTasks:
    """Keeps strong references to fire-and-forget tasks until they finish."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every task spawned so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

