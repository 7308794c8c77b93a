"""Execution context: lanes, result cache and retries behind one entry point."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from fxload.cache import ResultCache
from fxload.errors import MaxAttemptsExceeded, Timeout
from fxload.retry import RetryRunner
from fxload.sequence import SequenceQueue
from fxload.types import OperationConfig, SequenceKey

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def _noop() -> None:
    return None


def _label(operation: Callable[..., Any], config: OperationConfig) -> str:
    if config.cache_key is not None:
        return config.cache_key
    return getattr(operation, "__qualname__", type(operation).__name__)


class ExecutionContext:
    """Runs operations on named lanes with caching and retries.

    ``run_async`` submits at call time: the lane's tail pointer is updated
    before the caller gets the task back, so two calls made one after the
    other keep that order even if their tasks are awaited the other way round.
    """

    def __init__(
        self,
        *,
        cache: ResultCache | None = None,
        queue: SequenceQueue | None = None,
        retry: RetryRunner | None = None,
        wait_interval_ms: int = 1,
        max_wait_attempts: int = 1000,
    ) -> None:
        self.cache = cache or ResultCache()
        self.queue = queue or SequenceQueue()
        self.retry = retry or RetryRunner()
        self._wait_interval_ms = wait_interval_ms
        self._max_wait_attempts = max_wait_attempts

    def run_async(
        self,
        operation: Callable[[], Awaitable[T] | T],
        config: OperationConfig | None = None,
    ) -> asyncio.Task[T]:
        """Run ``operation`` on the lane named by ``config.sequence_key``.

        Inside the lane's turn a fresh cache hit short-circuits the call;
        otherwise the operation runs with retries, its result is cached (unless
        disabled) and ``on_complete`` is called with it. When ``chain_to`` is
        set, a no-op is queued on that lane once this turn settles.
        """
        config = config or OperationConfig()
        task = self.queue.enqueue(
            config.sequence_key, lambda: self._execute(operation, config)
        )
        if config.chain_to is not None:
            target = config.chain_to
            task.add_done_callback(lambda _: self._wake(target))
        return task

    async def _execute(
        self,
        operation: Callable[[], Awaitable[T] | T],
        config: OperationConfig,
    ) -> T:
        fingerprint = self.cache.fingerprint(operation, config)
        if fingerprint is not None:
            entry = await self.cache.fresh(fingerprint, config.cache_ttl)
            if entry is not None:
                return entry.value

        result = await self.retry.run(
            operation, config.retry_count, label=_label(operation, config)
        )

        if fingerprint is not None:
            await self.cache.put(fingerprint, result, config.cache_ttl)
        if config.on_complete is not None:
            config.on_complete(result)
        return result

    def _wake(self, key: SequenceKey) -> None:
        logger.debug("context.chain_wake", lane=key)
        self.queue.enqueue(key, _noop)

    async def wait(self, value: Any) -> Any:
        """Settle a value, awaitable, or zero-argument callable producing either.

        The wait is bounded by ``max_wait_attempts * wait_interval_ms``; past
        that MaxAttemptsExceeded is raised. Errors of the awaited work are
        re-raised unchanged.
        """
        if callable(value) and not inspect.isawaitable(value):
            value = value()
        if not inspect.isawaitable(value):
            return value

        task = asyncio.ensure_future(value)
        limit = self._max_wait_attempts * self._wait_interval_ms / 1000
        done, _ = await asyncio.wait({task}, timeout=limit)
        if not done:
            task.add_done_callback(_report_late)
            raise MaxAttemptsExceeded(self._max_wait_attempts)
        return task.result()

    async def wait_for_all(self, timeout_ms: float | None = None) -> None:
        """Drain barrier: return once no lane has in-flight work.

        Raises Timeout if work remains after ``timeout_ms``. In-flight
        operations are left running.
        """
        timeout = timeout_ms / 1000 if timeout_ms is not None else None
        try:
            await asyncio.wait_for(self.queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            pending = self.queue.pending()
            logger.warning("context.drain_timeout", timeout_ms=timeout_ms, pending=pending)
            raise Timeout(timeout_ms or 0, pending) from None

    def pending(self, key: SequenceKey | None = None) -> int:
        return self.queue.pending(key)


def _report_late(task: asyncio.Future[Any]) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning("context.late_failure", error=repr(error))
