"""
Retry policy exceptions.

Retry policies never wrap a failure in a synthetic "gave up" exception:
the last real exception propagates so callers can branch on its type.
The one exception a policy raises itself is OperationCanceledError, when
the caller's cancellation event is set between attempts.
"""


class OperationCanceledError(Exception):
    """
    Raised when a retried operation is canceled between attempts.

    The failure that triggered the last retry (if any) is available as
    `last_error` and as __cause__.

    Attributes:
        policy_name: Name of the policy that observed the cancellation
        attempts: Number of attempts executed before cancellation
        last_error: Exception of the last failed attempt, None if no attempt ran
    """

    def __init__(
        self,
        policy_name: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        self.policy_name = policy_name
        self.attempts = attempts
        self.last_error = last_error

        super().__init__(
            f"Operation canceled by caller after {attempts} attempt(s) "
            f"under retry policy '{policy_name}'"
            + (f". Last error: {type(last_error).__name__}" if last_error else "")
        )
