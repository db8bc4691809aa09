# tests/test_retry.py

from __future__ import annotations

import pytest

from task_planner.core.retry import RetryExecutor

from .fakes import InstantSleeper


class Flaky:
    """Fails `failures` times (a new exception each time), then returns `result`."""

    def __init__(self, failures: int, result: str = "ok") -> None:
        self.failures = failures
        self.result = result
        self.attempts = 0
        self.raised: list[Exception] = []

    async def __call__(self) -> str:
        self.attempts += 1
        if self.attempts <= self.failures:
            err = RuntimeError(f"attempt {self.attempts}")
            self.raised.append(err)
            raise err
        return self.result


@pytest.mark.asyncio
async def test_always_failing_operation_makes_three_attempts_and_raises_last_error() -> None:
    sleeper = InstantSleeper()
    retry = RetryExecutor(max_attempts=3, base_delay_seconds=1.0, sleep=sleeper)
    op = Flaky(failures=10)

    with pytest.raises(RuntimeError) as exc_info:
        await retry.execute(op)

    assert op.attempts == 3
    assert exc_info.value is op.raised[-1]
    assert str(exc_info.value) == "attempt 3"
    # 2**0 * 1000ms, 2**1 * 1000ms; no wait after the last attempt.
    assert sleeper.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_success_on_second_attempt_returns_result() -> None:
    sleeper = InstantSleeper()
    retry = RetryExecutor(max_attempts=3, base_delay_seconds=1.0, sleep=sleeper)
    op = Flaky(failures=1, result="done")

    assert await retry.execute(op) == "done"
    assert op.attempts == 2
    assert sleeper.delays == [1.0]


@pytest.mark.asyncio
async def test_per_call_max_attempts_overrides_default() -> None:
    sleeper = InstantSleeper()
    retry = RetryExecutor(max_attempts=3, sleep=sleeper)
    op = Flaky(failures=10)

    with pytest.raises(RuntimeError):
        await retry.execute(op, max_attempts=5)

    assert op.attempts == 5
    assert sleeper.delays == [1.0, 2.0, 4.0, 8.0]


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps() -> None:
    sleeper = InstantSleeper()
    retry = RetryExecutor(max_attempts=1, sleep=sleeper)
    op = Flaky(failures=1)

    with pytest.raises(RuntimeError):
        await retry.execute(op)

    assert op.attempts == 1
    assert sleeper.delays == []


def test_non_positive_attempts_are_clamped_to_one() -> None:
    assert RetryExecutor(max_attempts=0).max_attempts == 1
    assert RetryExecutor().delay_for(2) == 4.0
