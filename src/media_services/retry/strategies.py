"""
Backoff strategies for retry policies.

A backoff strategy answers two questions for a retry policy: may the
operation be attempted again, and how long to wait before doing so.

Strategies:
    1. FixedInterval: the same delay before every retry
    2. Incremental: initial interval, growing by a fixed increment per retry
    3. ExponentialBackoff: doubling delta on top of a minimum, capped at a maximum

Strategies hold configuration only. The retry count lives in the policy's
execution, so one strategy instance is safely shared by concurrent calls.
"""

import random
from abc import ABC, abstractmethod
from typing import Protocol


class RetryStrategy(Protocol):
    """
    Protocol for backoff strategies.

    `max_attempts` counts every call of the operation, the first one
    included: max_attempts=2 means exactly one retry.
    """

    max_attempts: int
    fast_first_retry: bool

    def should_retry(self, failed_attempts: int) -> bool:
        """Return True if another attempt may follow `failed_attempts` failures."""
        ...

    def get_delay(self, retry_index: int) -> float:
        """Delay in seconds before retry number `retry_index` (0-based)."""
        ...


class BackoffStrategy(ABC):
    """Shared validation and retry accounting for the concrete strategies."""

    name = "backoff"

    def __init__(self, max_attempts: int, fast_first_retry: bool = False):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.fast_first_retry = fast_first_retry

    def should_retry(self, failed_attempts: int) -> bool:
        return failed_attempts < self.max_attempts

    def get_delay(self, retry_index: int) -> float:
        if retry_index < 0:
            raise ValueError(f"retry_index must be >= 0, got {retry_index}")
        if retry_index == 0 and self.fast_first_retry:
            return 0.0
        return max(0.0, self.compute_delay(retry_index))

    @abstractmethod
    def compute_delay(self, retry_index: int) -> float:
        """Raw delay before retry `retry_index`; get_delay() applies fast first retry and clamping."""

    @staticmethod
    def _check_non_negative(**intervals: float) -> None:
        for name, value in intervals.items():
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_attempts={self.max_attempts})"


class FixedInterval(BackoffStrategy):
    """
    Constant delay between attempts.

    Use case: short-lived operations where waiting longer does not help
    (e.g. query retries against a load-balanced endpoint).
    """

    name = "fixed_interval"

    def __init__(self, max_attempts: int, interval: float = 1.0, fast_first_retry: bool = False):
        """
        Args:
            max_attempts: Total number of attempts, first one included
            interval: Delay before every retry, in seconds
            fast_first_retry: Retry the first failure immediately
        """
        super().__init__(max_attempts, fast_first_retry)
        self._check_non_negative(interval=interval)
        self.interval = interval

    def compute_delay(self, retry_index: int) -> float:
        return self.interval


class Incremental(BackoffStrategy):
    """
    Delay growing linearly: initial_interval + retry_index * increment.

    With initial_interval=0.2 and increment=0.1 the waits are 0.2s, 0.3s,
    0.4s... Delays never decrease within one execution.
    """

    name = "incremental"

    def __init__(
        self,
        max_attempts: int,
        initial_interval: float,
        increment: float,
        fast_first_retry: bool = False,
    ):
        """
        Args:
            max_attempts: Total number of attempts, first one included
            initial_interval: Delay before the first retry, in seconds
            increment: Added to the delay for each further retry, in seconds
            fast_first_retry: Retry the first failure immediately
        """
        super().__init__(max_attempts, fast_first_retry)
        self._check_non_negative(initial_interval=initial_interval, increment=increment)
        self.initial_interval = initial_interval
        self.increment = increment

    def compute_delay(self, retry_index: int) -> float:
        return self.initial_interval + retry_index * self.increment


class ExponentialBackoff(BackoffStrategy):
    """
    Delay min_backoff + (2**retry_index - 1) * delta_backoff, capped at max_backoff.

    Jitter is off by default so delays are reproducible. With jitter > 0
    the delta is scaled by a random factor in [1 - jitter, 1 + jitter],
    which spreads retries of many clients hitting the same outage.
    """

    name = "exponential"

    def __init__(
        self,
        max_attempts: int,
        min_backoff: float,
        max_backoff: float,
        delta_backoff: float,
        jitter: float = 0.0,
        fast_first_retry: bool = False,
        rng: random.Random | None = None,
    ):
        """
        Args:
            max_attempts: Total number of attempts, first one included
            min_backoff: Delay before the first retry, in seconds
            max_backoff: Upper bound for any delay, in seconds
            delta_backoff: Base of the exponential growth, in seconds
            jitter: Relative randomization of the delta, 0 <= jitter < 1
            fast_first_retry: Retry the first failure immediately
            rng: Random source for jitter (tests pass a seeded one)
        """
        super().__init__(max_attempts, fast_first_retry)
        self._check_non_negative(
            min_backoff=min_backoff, max_backoff=max_backoff, delta_backoff=delta_backoff
        )
        if max_backoff < min_backoff:
            raise ValueError(
                f"max_backoff ({max_backoff}) must be >= min_backoff ({min_backoff})"
            )
        if not 0.0 <= jitter < 1.0:
            raise ValueError(f"jitter must be in [0, 1), got {jitter}")

        self.min_backoff = min_backoff
        self.max_backoff = max_backoff
        self.delta_backoff = delta_backoff
        self.jitter = jitter
        self._rng = rng or random.Random()

    def compute_delay(self, retry_index: int) -> float:
        factor = 1.0
        if self.jitter:
            factor = self._rng.uniform(1.0 - self.jitter, 1.0 + self.jitter)
        # Exponent capped so int -> float conversion cannot overflow
        delta = (2 ** min(retry_index, 62) - 1) * self.delta_backoff * factor
        return min(self.min_backoff + delta, self.max_backoff)
