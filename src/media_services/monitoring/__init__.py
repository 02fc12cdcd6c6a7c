"""Monitoring and metrics for retry policies."""

from media_services.monitoring.metrics import (
    retries_exhausted_total,
    retry_attempts_total,
    retry_delay_seconds,
)

__all__ = [
    "retry_attempts_total",
    "retries_exhausted_total",
    "retry_delay_seconds",
]
