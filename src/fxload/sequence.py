"""Per-key FIFO lanes of asynchronous work."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from fxload.types import SequenceKey

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class SequenceQueue:
    """Serializes operations submitted under the same sequence key.

    Each lane keeps a pointer to its most recently submitted task. A new
    operation waits for that tail to settle, success or failure, before it
    starts, and becomes the new tail immediately, before control returns to
    the event loop. Lanes with different keys never wait on each other.

    A failing operation delivers its exception to whoever awaits its task;
    the next operation in the lane still runs.
    """

    def __init__(self) -> None:
        self._tails: dict[SequenceKey, asyncio.Task[Any]] = {}
        self._pending: dict[SequenceKey, int] = {}

    def enqueue(
        self,
        key: SequenceKey,
        operation: Callable[[], Awaitable[T]],
    ) -> asyncio.Task[T]:
        """Schedule ``operation`` after everything already queued on ``key``."""
        loop = asyncio.get_running_loop()
        previous = self._tails.get(key)
        task = loop.create_task(self._run_after(previous, operation))
        self._tails[key] = task
        self._pending[key] = self._pending.get(key, 0) + 1
        task.add_done_callback(lambda done: self._settle(key, done))
        logger.debug("sequence.enqueued", lane=key, pending=self._pending[key])
        return task

    @staticmethod
    async def _run_after(
        previous: asyncio.Task[Any] | None,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        if previous is not None and not previous.done():
            # asyncio.wait does not raise the previous operation's error
            await asyncio.wait({previous})
        return await operation()

    def _settle(self, key: SequenceKey, task: asyncio.Task[Any]) -> None:
        remaining = self._pending.get(key, 1) - 1
        if remaining > 0:
            self._pending[key] = remaining
        else:
            self._pending.pop(key, None)
        if self._tails.get(key) is task:
            del self._tails[key]
        logger.debug("sequence.settled", lane=key, pending=remaining)

    def pending(self, key: SequenceKey | None = None) -> int:
        """Number of unsettled operations on one lane, or on all lanes."""
        if key is not None:
            return self._pending.get(key, 0)
        return sum(self._pending.values())

    def lanes(self) -> list[SequenceKey]:
        """Keys of lanes that currently have work."""
        return list(self._pending)

    async def join(self) -> None:
        """Wait until no lane has unsettled work, including work queued meanwhile."""
        while True:
            tails = [task for task in self._tails.values() if not task.done()]
            if not tails:
                return
            await asyncio.wait(tails)
