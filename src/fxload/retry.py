"""Bounded-attempt execution of an operation."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from fxload.errors import RetryExhausted

T = TypeVar("T")

logger = structlog.get_logger(__name__)


async def invoke(operation: Callable[[], Any]) -> Any:
    """Call an operation, awaiting its result when it is awaitable."""
    result = operation()
    if inspect.isawaitable(result):
        result = await result
    return result


class RetryRunner:
    """Runs an operation up to ``retry_count + 1`` times.

    Each attempt is isolated: an exception in attempt K is recorded and
    attempt K+1 starts fresh. No delay is inserted between attempts.
    """

    async def run(
        self,
        operation: Callable[[], Any],
        retry_count: int = 0,
        *,
        label: str | None = None,
    ) -> Any:
        """Run ``operation`` and return its first successful result.

        With ``retry_count == 0`` the error of the single attempt propagates
        unchanged. Otherwise exhaustion raises RetryExhausted carrying the
        last attempt's error.
        """
        if retry_count < 0:
            raise ValueError("retry_count must be a non-negative integer")

        attempts = retry_count + 1
        last_error: Exception | None = None
        for attempt in range(attempts):
            if attempt:
                logger.warning(
                    "retry.attempt",
                    retry=attempt,
                    of=retry_count,
                    operation=label,
                    error=repr(last_error),
                )
            try:
                return await invoke(operation)
            except Exception as e:
                last_error = e

        assert last_error is not None
        if retry_count == 0:
            raise last_error
        logger.error("retry.exhausted", attempts=attempts, operation=label)
        raise RetryExhausted(attempts, last_error) from last_error
