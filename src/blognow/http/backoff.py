"""Backoff policy for transport retries.

Example:
    >>> from blognow.http.backoff import BackoffPolicy
    >>> policy = BackoffPolicy()
    >>> [policy.calculate_delay(n) for n in range(1, 6)]
    [1.0, 2.0, 4.0, 8.0, 10.0]
"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffPolicy:
    """Capped exponential backoff.

    Attributes:
        base_delay: Delay in seconds before the first retry
        max_delay: Upper bound on any single delay
        exponential_base: Multiplier per attempt (default: 2)
        jitter: Random jitter factor (0-1), off by default
    """

    base_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: float = 0.0

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay after a failed attempt.

        Args:
            attempt: Attempt that just failed (1-indexed)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        delay = min(delay, self.max_delay)

        if self.jitter > 0:
            jitter_amount = delay * self.jitter
            delay += random.uniform(-jitter_amount, jitter_amount)

        return max(0.0, delay)


__all__ = [
    "BackoffPolicy",
]
