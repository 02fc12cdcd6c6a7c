"""
Retry policy adapter hook.

An adapter wraps the operation a policy is about to retry. The policy
calls the adapter once per execute call; the callable it returns then
runs once per attempt. Data-service contexts use it to re-prepare a
request before each attempt, tests use it to count executions.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

T = TypeVar("T")


class RetryPolicyAdapter(Protocol):
    """Protocol for objects that adapt operations executed under a retry policy."""

    def adapt_execute_action(self, func: Callable[[], T]) -> Callable[[], T]:
        """Wrap a synchronous operation."""
        ...

    def adapt_execute_async(
        self, func: Callable[[], Awaitable[T]]
    ) -> Callable[[], Awaitable[T]]:
        """Wrap an asynchronous operation."""
        ...
