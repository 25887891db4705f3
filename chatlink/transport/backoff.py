"""Reconnect delay computation.

    delay = base * 2 ** (attempt - 1)
    delay *= 1 + jitter_ratio * uniform(-1, 1)
    delay = max(delay, floor[error_class])
    delay = min(delay, max_delay)

With a 20% jitter ratio consecutive attempts never overlap (1.2x < 1.6x), so
the sequence is non-decreasing until it reaches the cap.
"""

from __future__ import annotations

import random
from collections.abc import Callable

from chatlink.errors.kinds import ErrorClass
from chatlink.state.connection import ReconnectPolicy

RandomFn = Callable[[], float]


def exponential_delay(attempt: int, policy: ReconnectPolicy) -> float:
    """Theoretical delay before jitter, floors and cap."""
    exponent = max(0, int(attempt) - 1)
    return policy.base_delay_s * (2 ** exponent)


def compute_reconnect_delay(
    attempt: int,
    error_class: ErrorClass | None,
    policy: ReconnectPolicy,
    *,
    rng: RandomFn | None = None,
) -> float:
    """Seconds to wait before reconnect ``attempt`` (1-based)."""
    rand = rng or random.random
    delay = exponential_delay(attempt, policy)
    jitter = policy.jitter_ratio * (2.0 * rand() - 1.0)
    delay = delay * (1.0 + jitter)
    delay = max(delay, policy.floor_for(error_class))
    return max(0.0, min(delay, policy.max_delay_s))


__all__ = ["compute_reconnect_delay", "exponential_delay"]
