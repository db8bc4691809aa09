# src/task_planner/core/retry.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """
    Bounded exponential backoff around an async operation.

    Attempt i (0-based) that fails waits 2**i * base_delay seconds before the
    next one. After the last attempt the original exception propagates as-is.
    Attempts are sequential. No jitter, no retryable/non-retryable split.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        sleep: Sleeper | None = None,
    ) -> None:
        self.max_attempts = max(1, int(max_attempts))
        self.base_delay_seconds = float(base_delay_seconds)
        self._sleep = sleep or asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        return (2**attempt) * self.base_delay_seconds

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int | None = None,
        *,
        label: str = "operation",
    ) -> T:
        attempts = self.max_attempts if max_attempts is None else max(1, int(max_attempts))

        for attempt in range(attempts):
            try:
                return await operation()
            except Exception as e:
                if attempt == attempts - 1:
                    logger.warning(
                        "%s failed after %d attempt(s): %s", label, attempts, e.__class__.__name__
                    )
                    raise
                delay = self.delay_for(attempt)
                logger.info(
                    "%s failed (attempt %d/%d, %s); retrying in %.1fs",
                    label,
                    attempt + 1,
                    attempts,
                    e.__class__.__name__,
                    delay,
                )
                await self._sleep(delay)

        raise AssertionError("unreachable")
