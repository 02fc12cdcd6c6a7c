"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from media_services.config import Settings
from media_services.retry.factory import RetryPolicyFactory


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with short backoff so retry tests stay fast.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.CONNECTION_RETRY_MAX_ATTEMPTS = 1
    """
    return Settings(
        # === Application ===
        APP_NAME="Media Services Client (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry & Backoff ===
        CONNECTION_RETRY_MAX_ATTEMPTS=4,
        CONNECTION_RETRY_SLEEP_QUANTUM_MS=1,  # 1ms quantum, 16ms max backoff
        RETRY_MAX_BACKOFF_MULTIPLIER=16,
        RETRY_JITTER=0.0,

        # === Web Requests ===
        WEB_REQUEST_TIMEOUT=5.0,

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def policy_factory(test_settings: Settings) -> RetryPolicyFactory:
    """RetryPolicyFactory built from test settings."""
    return RetryPolicyFactory(test_settings)


@pytest.fixture
def failing_operation():
    """Factory fixture building an operation that fails a number of times, then succeeds.

    Usage:
        def test_something(failing_operation):
            op = failing_operation(ConnectionResetError(), failures=2, result=10)
            op()  # raises twice, then returns 10
            assert op.calls == 3
    """

    class FailingOperation:
        def __init__(self, error: Exception, failures: int, result):
            self.error = error
            self.failures = failures
            self.result = result
            self.calls = 0

        def __call__(self):
            self.calls += 1
            if self.calls <= self.failures:
                raise self.error
            return self.result

    def _create(error: Exception, failures: int, result=10) -> FailingOperation:
        return FailingOperation(error, failures, result)

    return _create


@pytest.fixture
def failing_coroutine():
    """Async counterpart of failing_operation: a coroutine function with a call counter."""

    class FailingCoroutine:
        def __init__(self, error: Exception, failures: int, result):
            self.error = error
            self.failures = failures
            self.result = result
            self.calls = 0

        async def __call__(self):
            self.calls += 1
            if self.calls <= self.failures:
                raise self.error
            return self.result

    def _create(error: Exception, failures: int, result=10) -> FailingCoroutine:
        return FailingCoroutine(error, failures, result)

    return _create
