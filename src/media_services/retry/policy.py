"""
Retry policy executing operations with transient fault handling.

MediaRetryPolicy combines an error detection strategy (is this failure
worth retrying?) with a backoff strategy (how many attempts, how long to
wait) and runs caller-supplied operations under them.

Execution per call:
    1. Attempt the operation
    2. On failure, ask the detection strategy whether it is transient
    3. Non-transient: re-raise immediately (no retry, no delay)
    4. Transient with attempts left: wait the backoff delay, go to 1
    5. Transient without attempts left: re-raise the last exception

The original exception object always propagates, never a wrapper, so
callers can branch on the real failure type.

Usage:
    policy = MediaRetryPolicy.incremental(
        QueryErrorDetectionStrategy(), max_attempts=3,
        initial_interval=0.2, increment=0.1, name="query",
    )
    assets = policy.execute_action(lambda: context.query("Assets"))
    asset = await policy.execute_async(lambda: client.get_asset(asset_id))
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from media_services.monitoring.metrics import (
    retries_exhausted_total,
    retry_attempts_total,
    retry_delay_seconds,
)
from media_services.retry.adapter import RetryPolicyAdapter
from media_services.retry.detection import MediaErrorDetectionStrategy
from media_services.retry.exceptions import OperationCanceledError
from media_services.retry.metadata import RetryingEvent
from media_services.retry.strategies import (
    ExponentialBackoff,
    FixedInterval,
    Incremental,
    RetryStrategy,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RetryingCallback = Callable[[RetryingEvent], None]


class MediaRetryPolicy:
    """
    Retry policy for media services operations.

    A policy is configuration only: detection strategy, backoff strategy,
    name and optional adapter. Attempt counters are local to each execute
    call, so one policy instance is shared across threads and tasks.

    Attributes:
        error_detection_strategy: Decides which failures are transient
        retry_strategy: Attempt limit and backoff delays
        name: Policy name used in logs and metric labels
        adapter: Optional RetryPolicyAdapter wrapping each executed operation
        record_metrics: Whether Prometheus metrics are updated
    """

    def __init__(
        self,
        error_detection_strategy: MediaErrorDetectionStrategy,
        retry_strategy: RetryStrategy,
        *,
        name: str = "default",
        adapter: RetryPolicyAdapter | None = None,
        record_metrics: bool = True,
    ):
        if error_detection_strategy is None:
            raise ValueError("error_detection_strategy is required")
        if retry_strategy is None:
            raise ValueError("retry_strategy is required")

        self.error_detection_strategy = error_detection_strategy
        self.retry_strategy = retry_strategy
        self.name = name
        self.adapter = adapter
        self.record_metrics = record_metrics
        self._retrying_callbacks: list[RetryingCallback] = []

        logger.debug(
            "MediaRetryPolicy initialized",
            policy=name,
            detection_strategy=type(error_detection_strategy).__name__,
            retry_strategy=repr(retry_strategy),
            max_attempts=retry_strategy.max_attempts,
            has_adapter=adapter is not None,
        )

    # -- construction helpers -------------------------------------------------

    @classmethod
    def fixed_interval(
        cls,
        error_detection_strategy: MediaErrorDetectionStrategy,
        max_attempts: int,
        interval: float = 1.0,
        **kwargs,
    ) -> "MediaRetryPolicy":
        """Policy waiting `interval` seconds before every retry."""
        return cls(error_detection_strategy, FixedInterval(max_attempts, interval), **kwargs)

    @classmethod
    def incremental(
        cls,
        error_detection_strategy: MediaErrorDetectionStrategy,
        max_attempts: int,
        initial_interval: float,
        increment: float,
        **kwargs,
    ) -> "MediaRetryPolicy":
        """Policy waiting initial_interval + n * increment seconds before retry n."""
        return cls(
            error_detection_strategy,
            Incremental(max_attempts, initial_interval, increment),
            **kwargs,
        )

    @classmethod
    def exponential(
        cls,
        error_detection_strategy: MediaErrorDetectionStrategy,
        max_attempts: int,
        min_backoff: float,
        max_backoff: float,
        delta_backoff: float,
        **kwargs,
    ) -> "MediaRetryPolicy":
        """Policy with exponential backoff between min_backoff and max_backoff."""
        return cls(
            error_detection_strategy,
            ExponentialBackoff(max_attempts, min_backoff, max_backoff, delta_backoff),
            **kwargs,
        )

    def with_adapter(self, adapter: RetryPolicyAdapter | None) -> "MediaRetryPolicy":
        """Return a copy of this policy using `adapter`; retrying callbacks are kept."""
        policy = MediaRetryPolicy(
            self.error_detection_strategy,
            self.retry_strategy,
            name=self.name,
            adapter=adapter,
            record_metrics=self.record_metrics,
        )
        policy._retrying_callbacks = list(self._retrying_callbacks)
        return policy

    def on_retrying(self, callback: RetryingCallback) -> RetryingCallback:
        """
        Register a callback invoked before each backoff wait.

        Returns the callback so it can be used as a decorator.
        """
        self._retrying_callbacks.append(callback)
        return callback

    # -- execution ------------------------------------------------------------

    def execute_action(
        self,
        func: Callable[[], T],
        cancel_event: threading.Event | None = None,
    ) -> T:
        """
        Run `func` with retries, blocking the calling thread during backoff.

        Args:
            func: Zero-argument operation to execute
            cancel_event: Optional event; when set, no further attempt starts
                and the backoff wait is cut short

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The original exception of the last failed attempt
            OperationCanceledError: `cancel_event` was set before an attempt
        """
        if func is None:
            raise ValueError("func is required")

        operation = self.adapter.adapt_execute_action(func) if self.adapter else func
        failed_attempts = 0
        last_error: Exception | None = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._raise_canceled(failed_attempts, last_error)

            try:
                result = operation()
            except Exception as e:
                failed_attempts += 1
                delay = self._should_retry(e, failed_attempts)
                if delay is None:
                    raise
                last_error = e
            else:
                self._record_success(failed_attempts)
                return result

            if cancel_event is not None:
                cancel_event.wait(delay)
            elif delay > 0:
                time.sleep(delay)

    async def execute_async(
        self,
        func: Callable[[], Awaitable[T]],
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """
        Await `func()` with retries; backoff waits without blocking the event loop.

        Args:
            func: Zero-argument callable returning an awaitable (coroutine
                function, or a lambda creating a task/future)
            cancel_event: Optional event; when set, no further attempt starts
                and the backoff wait is cut short

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The original exception of the last failed attempt
            OperationCanceledError: `cancel_event` was set before an attempt
        """
        if func is None:
            raise ValueError("func is required")

        operation = self.adapter.adapt_execute_async(func) if self.adapter else func
        failed_attempts = 0
        last_error: Exception | None = None

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._raise_canceled(failed_attempts, last_error)

            try:
                result = await operation()
            except Exception as e:
                failed_attempts += 1
                delay = self._should_retry(e, failed_attempts)
                if delay is None:
                    raise
                last_error = e
            else:
                self._record_success(failed_attempts)
                return result

            if cancel_event is not None and delay > 0:
                try:
                    await asyncio.wait_for(cancel_event.wait(), timeout=delay)
                except TimeoutError:
                    pass
            else:
                await asyncio.sleep(delay)

    # -- internals ------------------------------------------------------------

    def _should_retry(self, error: Exception, failed_attempts: int) -> float | None:
        """
        Decide what follows a failed attempt.

        Returns the backoff delay in seconds when the operation should be
        retried, None when the error must propagate.
        """
        if not self.error_detection_strategy.is_transient(error):
            logger.info(
                "Non-transient failure, not retrying",
                policy=self.name,
                attempt=failed_attempts,
                error_type=type(error).__name__,
            )
            self._count_attempt("fatal")
            return None

        if not self.retry_strategy.should_retry(failed_attempts):
            logger.error(
                f"Retry attempts exhausted after {failed_attempts} attempts",
                policy=self.name,
                attempts=failed_attempts,
                max_attempts=self.retry_strategy.max_attempts,
                error_type=type(error).__name__,
            )
            self._count_attempt("exhausted")
            if self.record_metrics:
                retries_exhausted_total.labels(policy=self.name).inc()
            return None

        delay = self.retry_strategy.get_delay(failed_attempts - 1)
        event = RetryingEvent(
            policy_name=self.name,
            current_retry_count=failed_attempts,
            delay_seconds=delay,
            last_exception=error,
        )

        logger.warning(
            f"Transient failure, retrying (attempt {failed_attempts + 1}/{self.retry_strategy.max_attempts})",
            policy=self.name,
            retry_count=failed_attempts,
            delay_seconds=delay,
            error_type=type(error).__name__,
        )
        self._count_attempt("transient")
        if self.record_metrics:
            retry_delay_seconds.labels(policy=self.name).observe(delay)

        for callback in self._retrying_callbacks:
            callback(event)

        return delay

    def _record_success(self, failed_attempts: int) -> None:
        self._count_attempt("success")
        if failed_attempts:
            logger.info(
                "Operation succeeded after retries",
                policy=self.name,
                total_attempts=failed_attempts + 1,
            )

    def _raise_canceled(self, failed_attempts: int, last_error: Exception | None) -> None:
        logger.info(
            "Retry canceled by caller",
            policy=self.name,
            attempts=failed_attempts,
            last_error_type=type(last_error).__name__ if last_error else None,
        )
        self._count_attempt("canceled")
        raise OperationCanceledError(self.name, failed_attempts, last_error) from last_error

    def _count_attempt(self, outcome: str) -> None:
        if self.record_metrics:
            retry_attempts_total.labels(policy=self.name, outcome=outcome).inc()

    def __repr__(self) -> str:
        return (
            f"MediaRetryPolicy(name={self.name!r}, "
            f"detection={type(self.error_detection_strategy).__name__}, "
            f"strategy={self.retry_strategy!r})"
        )
