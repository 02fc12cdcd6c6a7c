"""Unit test fixtures (adapters and recorders).

Provides instrumentation objects for testing retry policies without
external dependencies.
"""

import pytest

from media_services.retry.metadata import RetryingEvent


class CountingRetryAdapter:
    """RetryPolicyAdapter counting adaptations and wrapped executions."""

    def __init__(self):
        self.number_of_adapt_called = 0
        self.executed_by_execute_action = 0
        self.executed_by_execute_async = 0

    def adapt_execute_action(self, func):
        self.number_of_adapt_called += 1

        def _wrapped():
            self.executed_by_execute_action += 1
            return func()

        return _wrapped

    def adapt_execute_async(self, func):
        self.number_of_adapt_called += 1

        async def _wrapped():
            self.executed_by_execute_async += 1
            return await func()

        return _wrapped


@pytest.fixture
def counting_adapter() -> CountingRetryAdapter:
    """Fresh CountingRetryAdapter."""
    return CountingRetryAdapter()


@pytest.fixture
def retrying_events() -> list[RetryingEvent]:
    """List to collect RetryingEvent instances via policy.on_retrying(events.append)."""
    return []
