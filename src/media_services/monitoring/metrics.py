"""Prometheus metrics for retry policies.

Scraped by whatever process embeds the client. Alert rules worth setting:
- retries_exhausted_total (operations that failed after all attempts)
- retry_attempts_total{outcome="transient"} rate (backend instability)
"""

from prometheus_client import Counter, Histogram

retry_attempts_total = Counter(
    "media_retry_attempts_total",
    "Attempts executed under a retry policy by outcome",
    ["policy", "outcome"],
)
"""
Attempts counter by policy and outcome.

Labels:
- policy: save_changes, query, blob_storage, web_request (or a custom name)
- outcome: success, transient (will retry), fatal (non-transient), exhausted, canceled
"""

retries_exhausted_total = Counter(
    "media_retries_exhausted_total",
    "Executions that failed with a transient error after the last attempt",
    ["policy"],
)

retry_delay_seconds = Histogram(
    "media_retry_delay_seconds",
    "Backoff delay applied before a retry",
    ["policy"],
    buckets=[0.0, 0.05, 0.1, 0.2, 0.4, 0.8, 1.6, 3.2, 6.4],
)
