"""Unit tests for the retry engine."""

import pytest
from unittest.mock import MagicMock

from selenium_flow.actions.executor import ActionExecutor, RetryBudget
from selenium_flow.core.exceptions import (
    OptionNotFoundError,
    TransientDriverError,
    TransientNotFound,
)


class TestRetryBudget:
    """Tests for deadline arithmetic."""

    def test_spend_charges_lookup_plus_min_retry(self):
        budget = RetryBudget(2000)

        remaining = budget.spend(lookup_ms=400, retry_ms=100, retry_min_ms=500)

        assert remaining == 1100
        assert budget.spent_ms == 900

    def test_spend_charges_slow_retry_hook(self):
        budget = RetryBudget(2000)

        budget.spend(lookup_ms=100, retry_ms=800, retry_min_ms=500)

        assert budget.remaining_ms == 1100

    def test_remaining_never_negative(self):
        budget = RetryBudget(300)

        budget.spend(lookup_ms=400, retry_ms=0, retry_min_ms=500)

        assert budget.remaining_ms == 0
        assert not budget.covers(0)

    def test_covers_requires_room_for_a_lookup(self):
        budget = RetryBudget(200)

        assert budget.covers(100)
        assert not budget.covers(200)
        assert not budget.covers(400)

    def test_negative_initial_budget_rejected(self):
        with pytest.raises(ValueError):
            RetryBudget(-1)


class TestActionExecutor:
    """Tests for ActionExecutor.run."""

    def test_success_on_first_attempt(self, fake_clock):
        hook = MagicMock()
        executor = ActionExecutor(hook, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(lambda: "done", 2000)

        assert result.succeeded is True
        assert result.value == "done"
        assert result.attempts == 1
        assert result.remaining_ms == 2000
        hook.assert_not_called()

    def test_zero_timeout_still_attempts_once(self, fake_clock):
        attempt = MagicMock(side_effect=TransientNotFound("absent"))
        executor = ActionExecutor(None, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(attempt, 0)

        assert result.succeeded is False
        assert attempt.call_count == 1
        assert result.remaining_ms == 0

    def test_exhaustion_with_instant_lookups(self, fake_clock):
        """Instant lookups and a 500 ms minimum retry fit four attempts into 2 s."""
        attempt = MagicMock(side_effect=TransientNotFound("absent"))
        executor = ActionExecutor(None, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(attempt, 2000)

        assert result.succeeded is False
        assert result.attempts == 4
        assert isinstance(result.last_error, TransientNotFound)
        assert fake_clock.sleeps == [0.5, 0.5, 0.5, 0.5]
        assert result.elapsed_ms == pytest.approx(2000)

    def test_exhaustion_with_slow_lookups(self, fake_clock):
        """400 ms lookups: 2000 - 900 = 1100, then 1100 - 900 = 200 < 400 stops."""

        def attempt():
            fake_clock.advance(0.4)
            raise TransientNotFound("absent")

        executor = ActionExecutor(None, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(attempt, 2000)

        assert result.attempts == 2
        assert result.remaining_ms == pytest.approx(200)

    def test_retry_hook_runs_between_attempts(self, fake_clock):
        hook = MagicMock()
        attempt = MagicMock(side_effect=[TransientDriverError("stale"), TransientNotFound("absent"), 42])
        executor = ActionExecutor(hook, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(attempt, 10000)

        assert result.succeeded is True
        assert result.value == 42
        assert result.attempts == 3
        assert hook.call_count == 2

    def test_slow_hook_is_not_padded(self, fake_clock):
        hook = MagicMock(side_effect=lambda: fake_clock.advance(0.8))
        attempt = MagicMock(side_effect=[TransientNotFound("absent"), "ok"])
        executor = ActionExecutor(hook, 500, clock=fake_clock, sleep=fake_clock.sleep)

        result = executor.run(attempt, 2000)

        assert result.succeeded is True
        assert fake_clock.sleeps == []
        assert result.remaining_ms == pytest.approx(1200)

    def test_non_retryable_error_escapes_without_hook(self, fake_clock):
        hook = MagicMock()
        attempt = MagicMock(side_effect=OptionNotFoundError("no option"))
        executor = ActionExecutor(hook, 500, clock=fake_clock, sleep=fake_clock.sleep)

        with pytest.raises(OptionNotFoundError):
            executor.run(attempt, 10000)

        assert attempt.call_count == 1
        hook.assert_not_called()
        assert fake_clock.sleeps == []
