"""
Retrying event record.

This module defines the RetryingEvent dataclass handed to retrying
callbacks each time a policy decides to retry a failed attempt.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryingEvent:
    """
    Snapshot of a retry decision.

    Attributes:
        policy_name: Name of the retry policy (save_changes, query, ...)
        current_retry_count: 1-based number of the retry about to happen
        delay_seconds: Backoff delay applied before the retry
        last_exception: Transient exception raised by the failed attempt
    """

    policy_name: str
    current_retry_count: int
    delay_seconds: float
    last_exception: BaseException

    def __post_init__(self) -> None:
        """Validate event invariants."""
        if self.current_retry_count < 1:
            raise ValueError("current_retry_count must be >= 1")

        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
