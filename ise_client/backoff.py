"""Exponential backoff with jitter for the retry loop.

The delay before retry ``attempt`` (0-indexed) grows as
``min_delay * factor ** attempt``, is capped at ``max_delay``, and is then
jittered into the upper half of ``[min_delay, capped]``::

    delay = min_delay + uniform(0.5, 1.0) * (capped - min_delay)

Jitter keeps many clients that failed together from retrying in lockstep,
while the result always stays within ``[min_delay, max_delay]``.
"""

import math
import random
from dataclasses import dataclass


def calculate_backoff(
    attempt: int,
    min_delay: float,
    max_delay: float,
    factor: float,
    rng: random.Random | None = None,
) -> float:
    """Calculate the jittered delay before a retry.

    Args:
        attempt: The retry attempt number (0-indexed).
        min_delay: Lower bound of the delay in seconds.
        max_delay: Upper bound of the delay in seconds.
        factor: Growth factor applied per attempt.
        rng: Random source; the module-level generator when omitted.

    Returns:
        The delay in seconds. Never negative and never infinite; values
        outside ``[min_delay, max_delay]`` are clamped before jitter.
    """
    try:
        raw = min_delay * math.pow(factor, attempt)
    except OverflowError:
        raw = max_delay if min_delay > 0 else 0.0
    raw = max(min_delay, min(raw, max_delay))

    jitter = (rng or random).uniform(0.5, 1.0)
    return min_delay + jitter * (raw - min_delay)


def should_retry(attempt: int, max_retries: int) -> bool:
    """Return True while ``attempt`` is still within the retry budget."""
    return attempt < max_retries


@dataclass(frozen=True)
class BackoffPolicy:
    """Retry budget and delay bounds for one client.

    Attributes:
        max_retries: Maximum number of retries after the first attempt.
        min_delay: Minimum delay between two attempts, in seconds.
        max_delay: Maximum delay between two attempts, in seconds.
        factor: Exponential growth factor.
    """

    max_retries: int
    min_delay: float
    max_delay: float
    factor: float

    def should_retry(self, attempt: int) -> bool:
        return should_retry(attempt, self.max_retries)

    def delay(self, attempt: int, rng: random.Random | None = None) -> float:
        return calculate_backoff(attempt, self.min_delay, self.max_delay, self.factor, rng)
