"""
Factory for the client's named retry policies.

Every operation kind gets its own policy: saving entity changes, running
data-service queries, transferring blobs and sending plain web requests.
The policies differ in their error detection strategy; the backoff shape
comes from Settings (exponential, 100 ms quantum up to 1.6 s by default).

Subclasses override the get_*_error_detection_strategy() hooks or the
get_*_retry_policy() methods to customize one operation kind, e.g. a save
policy that also retries I/O errors.
"""

from media_services.config import Settings
from media_services.retry.adapter import RetryPolicyAdapter
from media_services.retry.detection import (
    MediaErrorDetectionStrategy,
    QueryErrorDetectionStrategy,
    SaveChangesErrorDetectionStrategy,
    StorageTransientErrorDetectionStrategy,
    WebRequestTransientErrorDetectionStrategy,
)
from media_services.retry.policy import MediaRetryPolicy
from media_services.retry.strategies import ExponentialBackoff, RetryStrategy

SAVE_CHANGES_POLICY = "save_changes"
QUERY_POLICY = "query"
BLOB_STORAGE_POLICY = "blob_storage"
WEB_REQUEST_POLICY = "web_request"


class RetryPolicyFactory:
    """
    Builds the retry policies used by the media services client.

    Attributes:
        settings: Client settings (retry counts, backoff quantum, jitter)
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    # -- backoff --------------------------------------------------------------

    @property
    def max_attempts(self) -> int:
        # CONNECTION_RETRY_MAX_ATTEMPTS counts retries; the first attempt is extra
        return self.settings.CONNECTION_RETRY_MAX_ATTEMPTS + 1

    def create_retry_strategy(self) -> RetryStrategy:
        """Default exponential backoff built from settings."""
        quantum = self.settings.CONNECTION_RETRY_SLEEP_QUANTUM_MS / 1000.0
        return ExponentialBackoff(
            max_attempts=self.max_attempts,
            min_backoff=quantum,
            max_backoff=quantum * self.settings.RETRY_MAX_BACKOFF_MULTIPLIER,
            delta_backoff=quantum,
            jitter=self.settings.RETRY_JITTER,
        )

    # -- error detection hooks -------------------------------------------------

    def get_save_changes_error_detection_strategy(self) -> MediaErrorDetectionStrategy:
        return SaveChangesErrorDetectionStrategy()

    def get_query_error_detection_strategy(self) -> MediaErrorDetectionStrategy:
        return QueryErrorDetectionStrategy()

    def get_storage_error_detection_strategy(self) -> MediaErrorDetectionStrategy:
        return StorageTransientErrorDetectionStrategy()

    def get_web_request_error_detection_strategy(self) -> MediaErrorDetectionStrategy:
        return WebRequestTransientErrorDetectionStrategy()

    # -- policies ---------------------------------------------------------------

    def _create_policy(
        self,
        name: str,
        detection: MediaErrorDetectionStrategy,
        adapter: RetryPolicyAdapter | None = None,
    ) -> MediaRetryPolicy:
        return MediaRetryPolicy(
            detection,
            self.create_retry_strategy(),
            name=name,
            adapter=adapter,
            record_metrics=self.settings.PROMETHEUS_ENABLED,
        )

    def get_save_changes_retry_policy(
        self, adapter: RetryPolicyAdapter | None = None
    ) -> MediaRetryPolicy:
        """Policy for create/update/delete requests against the data service."""
        return self._create_policy(
            SAVE_CHANGES_POLICY, self.get_save_changes_error_detection_strategy(), adapter
        )

    def get_query_retry_policy(
        self, adapter: RetryPolicyAdapter | None = None
    ) -> MediaRetryPolicy:
        """Policy for data-service queries."""
        return self._create_policy(
            QUERY_POLICY, self.get_query_error_detection_strategy(), adapter
        )

    def get_blob_storage_client_retry_policy(self) -> MediaRetryPolicy:
        """Policy for blob uploads and downloads."""
        return self._create_policy(
            BLOB_STORAGE_POLICY, self.get_storage_error_detection_strategy()
        )

    def get_web_request_retry_policy(self) -> MediaRetryPolicy:
        """Policy for plain web requests (account endpoint discovery)."""
        return self._create_policy(
            WEB_REQUEST_POLICY, self.get_web_request_error_detection_strategy()
        )
