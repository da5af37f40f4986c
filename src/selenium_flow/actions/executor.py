"""Deadline-bounded retry engine shared by all actions."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.exceptions import TransientDriverError, TransientNotFound

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (TransientNotFound, TransientDriverError)


class RetryBudget:
    """
    Remaining time of an action in milliseconds.

    The remaining time only ever decreases and never drops below zero.
    """

    def __init__(self, initial_ms: float):
        if initial_ms < 0:
            raise ValueError(f"Retry budget cannot be negative: {initial_ms}")
        self.initial_ms = float(initial_ms)
        self.remaining_ms = float(initial_ms)

    def spend(self, lookup_ms: float, retry_ms: float, retry_min_ms: float) -> float:
        """Charge one failed attempt: ``lookup + max(retry, retry_min)``."""
        cost = max(0.0, lookup_ms) + max(retry_ms, retry_min_ms, 0.0)
        self.remaining_ms = max(0.0, self.remaining_ms - cost)
        return self.remaining_ms

    def covers(self, lookup_ms: float) -> bool:
        """Whether another lookup of the given duration still fits."""
        return self.remaining_ms > 0 and self.remaining_ms > lookup_ms

    @property
    def spent_ms(self) -> float:
        return self.initial_ms - self.remaining_ms

    def __repr__(self) -> str:
        return f"RetryBudget(remaining={self.remaining_ms:.0f}ms of {self.initial_ms:.0f}ms)"


@dataclass
class ExecutionResult:
    """Outcome of a retry loop."""

    succeeded: bool
    value: Any = None
    attempts: int = 0
    remaining_ms: float = 0.0
    elapsed_ms: float = 0.0
    last_error: Optional[BaseException] = None


class ActionExecutor:
    """
    Runs an attempt function against a shrinking deadline.

    Each failed attempt (``TransientNotFound`` / ``TransientDriverError``)
    runs the retry hook, pads it with sleep up to ``retry_min_ms`` and charges
    ``lookup + max(hook, retry_min_ms)`` to the budget. The loop stops on
    success or once the remaining budget no longer covers a lookup. Any other
    exception escapes on the attempt that raised it, without running the hook.
    """

    def __init__(
        self,
        retry_hook: Optional[Callable[[], Any]] = None,
        retry_min_ms: float = 0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.retry_hook = retry_hook
        self.retry_min_ms = retry_min_ms
        self._clock = clock
        self._sleep = sleep

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def run_retry_hook(self) -> float:
        """Run the retry hook and wait out the minimum retry time. Returns hook duration."""
        start = self._now_ms()
        if self.retry_hook is not None:
            self.retry_hook()
        hook_ms = self._now_ms() - start
        if hook_ms < self.retry_min_ms:
            self._sleep((self.retry_min_ms - hook_ms) / 1000.0)
        logger.debug(
            f"Retry hook took {hook_ms:.0f} ms (total pause {self._now_ms() - start:.0f} ms)"
        )
        return hook_ms

    def run(self, attempt: Callable[[], Any], timeout_ms: float) -> ExecutionResult:
        """
        Call ``attempt`` until it succeeds or the budget runs out.

        Args:
            attempt: Returns the action value or raises a transient error
            timeout_ms: Initial budget

        Returns:
            ExecutionResult; ``succeeded`` is False on exhaustion and
            ``last_error`` holds the last transient error
        """
        budget = RetryBudget(timeout_ms)
        started = self._now_ms()
        attempts = 0

        while True:
            attempts += 1
            attempt_start = self._now_ms()
            try:
                value = attempt()
            except RETRYABLE_ERRORS as e:
                lookup_ms = self._now_ms() - attempt_start
                logger.debug(f"Attempt {attempts} failed after {lookup_ms:.0f} ms: {e!r}")
                hook_ms = self.run_retry_hook()
                budget.spend(lookup_ms, hook_ms, self.retry_min_ms)
                logger.debug(f"Current budget: {budget}")
                if not budget.covers(lookup_ms):
                    return ExecutionResult(
                        succeeded=False,
                        attempts=attempts,
                        remaining_ms=budget.remaining_ms,
                        elapsed_ms=self._now_ms() - started,
                        last_error=e,
                    )
                continue

            return ExecutionResult(
                succeeded=True,
                value=value,
                attempts=attempts,
                remaining_ms=budget.remaining_ms,
                elapsed_ms=self._now_ms() - started,
            )
