"""Unit tests for the blob storage retry bridge."""

import pytest

from media_services.retry.detection import StorageTransientErrorDetectionStrategy
from media_services.retry.policy import MediaRetryPolicy
from media_services.retry.storage import (
    DEFAULT_RETRY_INTERVAL,
    StorageRetryPolicy,
    as_storage_retry_policy,
)
from media_services.transport.exceptions import StorageError, StorageErrorCode


@pytest.fixture
def storage_policy() -> StorageRetryPolicy:
    """Bridge over an incremental blob policy: 3 attempts, 200ms + 100ms per retry."""
    policy = MediaRetryPolicy.incremental(
        StorageTransientErrorDetectionStrategy(),
        max_attempts=3,
        initial_interval=0.2,
        increment=0.1,
        name="blob_storage",
        record_metrics=False,
    )
    return as_storage_retry_policy(policy)


def test_as_storage_retry_policy_requires_policy():
    with pytest.raises(ValueError, match="retry_policy"):
        as_storage_retry_policy(None)


def test_create_instance_is_reusable(storage_policy):
    assert storage_policy.create_instance() is storage_policy


def test_transient_error_is_retried_with_backoff(storage_policy):
    error = StorageError("busy", error_code=StorageErrorCode.SERVER_BUSY, status_code=503)

    assert storage_policy.should_retry(0, 503, error) == (True, pytest.approx(0.2))
    assert storage_policy.should_retry(1, 503, error) == (True, pytest.approx(0.3))


def test_stops_when_attempts_exhausted(storage_policy):
    """3 attempts allow 2 retries: the third failure is final."""
    error = TimeoutError("read timed out")

    assert storage_policy.should_retry(2, None, error) == (False, DEFAULT_RETRY_INTERVAL)


def test_non_transient_error_is_not_retried(storage_policy):
    error = StorageError("not found", error_code=StorageErrorCode.BLOB_NOT_FOUND, status_code=404)

    assert storage_policy.should_retry(0, 404, error) == (False, DEFAULT_RETRY_INTERVAL)


def test_missing_exception_is_not_retried(storage_policy):
    assert storage_policy.should_retry(0, 500, None) == (False, DEFAULT_RETRY_INTERVAL)


def test_status_code_alone_does_not_decide(storage_policy):
    """Only the exception is classified; the status argument is informational."""
    error = StorageError("conflict", error_code=StorageErrorCode.CONDITION_NOT_MET)

    assert storage_policy.should_retry(0, 503, error)[0] is False


def test_bridge_is_stateless(storage_policy):
    error = ConnectionResetError("reset")

    for _ in range(3):
        assert storage_policy.should_retry(0, None, error) == (True, pytest.approx(0.2))
