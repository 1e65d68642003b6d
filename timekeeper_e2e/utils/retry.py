"""
Bounded retry for polling operations.

    page_loaded = retry(lambda: page.goto(url), interval=1.0, deadline=30.0)

Failures inside the window are discarded; once the deadline passes the
caller only sees RetryTimeout.
"""
from __future__ import annotations

import time
from typing import Callable, TypeVar

T = TypeVar("T")


class RetryTimeout(TimeoutError):
    """Raised when an operation never succeeded before its deadline."""

    def __init__(self, deadline: float, attempts: int):
        self.deadline = deadline
        self.attempts = attempts
        super().__init__(
            f"Operation did not succeed within {deadline:g}s ({attempts} attempts)"
        )


def retry(
    operation: Callable[[], T],
    interval: float,
    deadline: float,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """
    Call operation until it returns without raising, or the deadline passes.

    Args:
        operation: Zero-argument callable to attempt.
        interval: Seconds to wait after a failed attempt.
        deadline: Seconds from the first attempt after which no new attempt starts.
        retry_on: Exception types treated as "not yet". Anything else propagates.
        sleep: Injected for tests.
        clock: Injected for tests, must be monotonic.

    Returns:
        Whatever the first successful call returned.

    Raises:
        RetryTimeout: No attempt succeeded within the deadline.
    """
    started = clock()
    attempts = 0
    while clock() - started < deadline:
        attempts += 1
        try:
            return operation()
        except retry_on:
            sleep(interval)

    raise RetryTimeout(deadline, attempts)
