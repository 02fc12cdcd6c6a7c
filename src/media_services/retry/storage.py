"""
Bridge from MediaRetryPolicy to the blob storage client's retry hook.

The storage client does its own request loop and only asks, after each
failed request, "should I retry, and after how long?". StorageRetryPolicy
answers with the media policy's detection and backoff strategies so blob
transfers and entity operations share one retry configuration.
"""

from media_services.retry.policy import MediaRetryPolicy

# Answered when no retry happens, so the storage client never reads garbage
DEFAULT_RETRY_INTERVAL = 0.1


class StorageRetryPolicy:
    """
    Retry hook consumed by the storage client.

    Stateless: the storage client passes the retry count it tracks, so the
    same instance serves every request.
    """

    def __init__(self, retry_policy: MediaRetryPolicy):
        self.retry_policy = retry_policy

    def create_instance(self) -> "StorageRetryPolicy":
        return self

    def should_retry(
        self,
        current_retry_count: int,
        status_code: int | None,
        last_exception: BaseException | None,
    ) -> tuple[bool, float]:
        """
        Decide whether the storage client retries a failed request.

        Args:
            current_retry_count: Retries already performed (0 after the first failure)
            status_code: HTTP status of the failed request; not consulted, the
                decision comes from classifying `last_exception`
            last_exception: Exception raised by the failed request

        Returns:
            Tuple of (retry?, delay in seconds before the retry)
        """
        if not self.retry_policy.error_detection_strategy.is_transient(last_exception):
            return False, DEFAULT_RETRY_INTERVAL

        strategy = self.retry_policy.retry_strategy
        failed_attempts = current_retry_count + 1
        if not strategy.should_retry(failed_attempts):
            return False, DEFAULT_RETRY_INTERVAL

        return True, strategy.get_delay(current_retry_count)


def as_storage_retry_policy(retry_policy: MediaRetryPolicy) -> StorageRetryPolicy:
    """Expose `retry_policy` through the storage client's retry hook."""
    if retry_policy is None:
        raise ValueError("retry_policy is required")
    return StorageRetryPolicy(retry_policy)
