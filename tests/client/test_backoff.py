"""Unit tests for backoff calculation (ise_client/backoff.py).

The delay must always stay inside [min_delay, max_delay], saturate at the
maximum for large attempt numbers, and never be negative or infinite.
"""

import math
import random

import pytest

from ise_client.backoff import BackoffPolicy, calculate_backoff, should_retry


class FixedRandom(random.Random):
    """Random source returning a fixed jitter value."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def uniform(self, a: float, b: float) -> float:
        return self.value


# =============================================================================
# calculate_backoff
# =============================================================================

class TestCalculateBackoff:
    """Tests for the jittered exponential delay."""

    @pytest.mark.parametrize("attempt", range(0, 12))
    def test_within_bounds(self, attempt: int) -> None:
        """Every delay stays within [min_delay, max_delay]."""
        rng = random.Random(attempt)
        for _ in range(50):
            delay = calculate_backoff(attempt, 2.0, 60.0, 3.0, rng)
            assert 2.0 <= delay <= 60.0

    def test_first_attempt_is_min_delay(self) -> None:
        """With raw == min the jitter has nothing to spread."""
        assert calculate_backoff(0, 2.0, 60.0, 3.0) == 2.0

    def test_jitter_upper_half(self) -> None:
        """Jitter places the delay between the midpoint and the raw value."""
        # attempt 2: raw = 2 * 3 ** 2 = 18
        assert calculate_backoff(2, 2.0, 60.0, 3.0, FixedRandom(0.5)) == pytest.approx(10.0)
        assert calculate_backoff(2, 2.0, 60.0, 3.0, FixedRandom(1.0)) == pytest.approx(18.0)

    def test_saturates_at_max(self) -> None:
        assert calculate_backoff(10, 2.0, 60.0, 3.0, FixedRandom(1.0)) == pytest.approx(60.0)

    def test_huge_attempt_does_not_overflow(self) -> None:
        delay = calculate_backoff(100_000, 2.0, 60.0, 3.0, FixedRandom(1.0))
        assert math.isfinite(delay)
        assert delay == pytest.approx(60.0)

    def test_zero_bounds(self) -> None:
        """Zero delays (used by tests and tight loops) stay zero."""
        assert calculate_backoff(0, 0.0, 0.0, 3.0) == 0.0
        assert calculate_backoff(100_000, 0.0, 0.0, 3.0) == 0.0

    def test_max_below_min_is_clamped(self) -> None:
        """An inverted range never yields a negative delay."""
        delay = calculate_backoff(3, 5.0, 1.0, 3.0, FixedRandom(0.75))
        assert delay == 5.0

    def test_seeded_rng_is_deterministic(self) -> None:
        first = [calculate_backoff(n, 2.0, 60.0, 3.0, random.Random(7)) for n in range(5)]
        second = [calculate_backoff(n, 2.0, 60.0, 3.0, random.Random(7)) for n in range(5)]
        assert first == second


# =============================================================================
# should_retry
# =============================================================================

class TestShouldRetry:
    """Tests for the retry budget predicate."""

    def test_within_budget(self) -> None:
        assert should_retry(0, 3)
        assert should_retry(2, 3)

    def test_budget_spent(self) -> None:
        assert not should_retry(3, 3)
        assert not should_retry(4, 3)

    def test_zero_budget(self) -> None:
        assert not should_retry(0, 0)


class TestBackoffPolicy:
    """Tests for the policy wrapper."""

    def test_delegates(self) -> None:
        policy = BackoffPolicy(max_retries=2, min_delay=1.0, max_delay=4.0, factor=2.0)
        assert policy.should_retry(1)
        assert not policy.should_retry(2)
        assert policy.delay(5, FixedRandom(1.0)) == pytest.approx(4.0)

    def test_frozen(self) -> None:
        policy = BackoffPolicy(max_retries=2, min_delay=1.0, max_delay=4.0, factor=2.0)
        with pytest.raises(AttributeError):
            policy.max_retries = 5  # type: ignore[misc]
