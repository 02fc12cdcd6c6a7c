"""
Transient fault handling for media services operations.

This package decides whether a failed operation is retried and when:

1. **Error detection**: per operation kind (save changes, query, blob
   storage, web request), classify a failure as transient or fatal
2. **Backoff**: fixed interval, incremental or exponential delays
3. **Execution**: MediaRetryPolicy runs sync and async operations,
   re-raising the original exception when retries are exhausted

Main Components:
    - MediaRetryPolicy: Runs operations with retry semantics
    - MediaErrorDetectionStrategy: Base of the transient error classifiers
    - RetryStrategy: Protocol for backoff strategies
    - RetryPolicyFactory: Builds the client's named policies from settings
    - RetryPolicyAdapter: Hook wrapping the operation executed per attempt

Usage:
    >>> from media_services.retry import RetryPolicyFactory
    >>> policy = RetryPolicyFactory(settings).get_query_retry_policy()
    >>> assets = policy.execute_action(lambda: context.query("Assets"))
"""

from media_services.retry.adapter import RetryPolicyAdapter
from media_services.retry.detection import (
    MediaErrorDetectionStrategy,
    QueryErrorDetectionStrategy,
    SaveChangesErrorDetectionStrategy,
    StorageTransientErrorDetectionStrategy,
    WebRequestTransientErrorDetectionStrategy,
    find_inner_exception,
)
from media_services.retry.exceptions import OperationCanceledError
from media_services.retry.factory import RetryPolicyFactory
from media_services.retry.metadata import RetryingEvent
from media_services.retry.policy import MediaRetryPolicy
from media_services.retry.storage import StorageRetryPolicy, as_storage_retry_policy
from media_services.retry.strategies import (
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    RetryStrategy,
)

__all__ = [
    "ExponentialBackoff",
    "FixedInterval",
    "Incremental",
    "MediaErrorDetectionStrategy",
    "MediaRetryPolicy",
    "OperationCanceledError",
    "QueryErrorDetectionStrategy",
    "RetryPolicyAdapter",
    "RetryPolicyFactory",
    "RetryStrategy",
    "RetryingEvent",
    "SaveChangesErrorDetectionStrategy",
    "StorageRetryPolicy",
    "StorageTransientErrorDetectionStrategy",
    "WebRequestTransientErrorDetectionStrategy",
    "as_storage_retry_policy",
    "find_inner_exception",
]
