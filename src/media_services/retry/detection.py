"""
Transient error detection strategies.

Each retry policy owns an error detection strategy that decides whether a
failure is worth retrying. Operation kinds differ in what they can safely
retry, so each kind has its own strategy:

    - SaveChangesErrorDetectionStrategy: writes are not idempotent, only
      failures where the request never reached the server are transient
    - QueryErrorDetectionStrategy: reads are idempotent, timeouts and
      dropped connections are transient too
    - StorageTransientErrorDetectionStrategy: blob transfers, also retries
      I/O errors and storage "server busy"-style error codes
    - WebRequestTransientErrorDetectionStrategy: plain HTTP requests

Transport layers wrap the real cause, so every check searches the explicit
exception chain (__cause__ and exception group members).

Subclasses extend a strategy through on_is_transient(), which is OR-ed
with the built-in rules.
"""

import re
import socket
from abc import ABC, abstractmethod

import structlog

from media_services.transport.exceptions import (
    DataServiceClientError,
    DataServiceQueryError,
    DataServiceRequestError,
    DataServiceTransportError,
    StorageError,
    StorageErrorCode,
    WebErrorStatus,
    WebRequestError,
    find_inner_exception,
    iter_exception_chain,
)

logger = structlog.get_logger(__name__)

# Failures where the request did not reach the server: safe for any operation
COMMON_RETRYABLE_WEB_STATUSES: frozenset[WebErrorStatus] = frozenset(
    {
        WebErrorStatus.CONNECT_FAILURE,
        WebErrorStatus.NAME_RESOLUTION_FAILURE,
        WebErrorStatus.PROXY_NAME_RESOLUTION_FAILURE,
        WebErrorStatus.SEND_FAILURE,
    }
)

# Failures after the request may have been processed: idempotent operations only
IDEMPOTENT_RETRYABLE_WEB_STATUSES: frozenset[WebErrorStatus] = frozenset(
    {
        WebErrorStatus.PIPELINE_FAILURE,
        WebErrorStatus.CONNECTION_CLOSED,
        WebErrorStatus.KEEP_ALIVE_FAILURE,
        WebErrorStatus.UNKNOWN_ERROR,
        WebErrorStatus.RECEIVE_FAILURE,
        WebErrorStatus.REQUEST_CANCELED,
        WebErrorStatus.TIMEOUT,
    }
)

RETRYABLE_HTTP_STATUS_CODES: frozenset[int] = frozenset(
    {
        500,  # Internal Server Error
        502,  # Bad Gateway
        504,  # Gateway Timeout
        408,  # Request Timeout: the server did not receive the entire request
        503,  # Service Unavailable
    }
)

UNAUTHORIZED_HTTP_STATUS_CODES: frozenset[int] = frozenset({401, 403})

RETRYABLE_STORAGE_ERROR_CODES: frozenset[str] = frozenset(
    {
        StorageErrorCode.INTERNAL_ERROR,
        StorageErrorCode.SERVER_BUSY,
        StorageErrorCode.OPERATION_TIMED_OUT,
        StorageErrorCode.TABLE_SERVER_OUT_OF_MEMORY,
    }
)

_ERROR_CODE_PATTERN = re.compile(r"<code>(\w+)</code>", re.IGNORECASE)

_SOCKET_ERROR_TYPES: tuple[type[BaseException], ...] = (
    ConnectionError,
    socket.gaierror,
    socket.herror,
)


class MediaErrorDetectionStrategy(ABC):
    """
    Base class for transient error detection strategies.

    is_transient() is a pure predicate: the same exception always yields
    the same answer and the exception is never modified. It never raises;
    a failure while inspecting an exception counts as "not transient" so
    the original error reaches the caller.
    """

    def is_transient(self, exc: BaseException | None) -> bool:
        """Return True when `exc` is worth retrying under this strategy."""
        if exc is None:
            return False
        try:
            return self.check_is_transient(exc) or self.on_is_transient(exc)
        except Exception:
            logger.warning(
                "Error detection failed, treating exception as non-transient",
                strategy=type(self).__name__,
                error_type=type(exc).__name__,
                exc_info=True,
            )
            return False

    @abstractmethod
    def check_is_transient(self, exc: BaseException) -> bool:
        """Built-in rules of the strategy."""

    def on_is_transient(self, exc: BaseException) -> bool:
        """Extension hook for subclasses; OR-ed with check_is_transient()."""
        return False

    # -- shared rules -------------------------------------------------------

    @staticmethod
    def is_retriable_http_status_code(status_code: int, retry_on_unauthorized: bool = False) -> bool:
        if status_code in RETRYABLE_HTTP_STATUS_CODES:
            return True
        return retry_on_unauthorized and status_code in UNAUTHORIZED_HTTP_STATUS_CODES

    def is_retriable_web_error(
        self,
        exc: BaseException,
        idempotent: bool,
        retry_on_unauthorized: bool = False,
    ) -> bool:
        web_error = find_inner_exception(exc, WebRequestError)
        if web_error is None:
            return False

        if web_error.status in COMMON_RETRYABLE_WEB_STATUSES:
            return True
        if web_error.status == WebErrorStatus.PROTOCOL_ERROR:
            # No readable response: the server never answered properly
            if web_error.status_code is None:
                return True
            return self.is_retriable_http_status_code(web_error.status_code, retry_on_unauthorized)
        return idempotent and web_error.status in IDEMPOTENT_RETRYABLE_WEB_STATUSES

    def is_retriable_data_service_error(
        self,
        exc: BaseException,
        idempotent: bool,
        retry_on_unauthorized: bool = False,
    ) -> bool:
        transport_error = find_inner_exception(exc, DataServiceTransportError)
        if transport_error is not None:
            if transport_error.status_code is None:
                return idempotent
            if self.is_retriable_http_status_code(transport_error.status_code, retry_on_unauthorized):
                return True

        request_error = find_inner_exception(exc, DataServiceRequestError)
        if request_error is not None:
            response = request_error.response
            if response is None:
                return idempotent
            if response.is_batch_response:
                if self.is_retriable_http_status_code(response.batch_status_code, retry_on_unauthorized):
                    return True
            elif len(response.status_codes) == 1:
                if self.is_retriable_http_status_code(response.status_codes[0], retry_on_unauthorized):
                    return True

        query_error = find_inner_exception(exc, DataServiceQueryError)
        if query_error is not None:
            if query_error.status_code is None:
                return idempotent
            if self.is_retriable_http_status_code(query_error.status_code, retry_on_unauthorized):
                return True

        client_error = find_inner_exception(exc, DataServiceClientError)
        if client_error is not None:
            return self.is_retriable_http_status_code(client_error.status_code, retry_on_unauthorized)

        return False

    @staticmethod
    def is_socket_error(exc: BaseException) -> bool:
        return find_inner_exception(exc, _SOCKET_ERROR_TYPES) is not None

    @staticmethod
    def is_timeout_error(exc: BaseException) -> bool:
        return find_inner_exception(exc, TimeoutError) is not None

    @staticmethod
    def is_io_error(exc: BaseException) -> bool:
        return find_inner_exception(exc, OSError) is not None


class SaveChangesErrorDetectionStrategy(MediaErrorDetectionStrategy):
    """
    Detection rules for saving changes (create, update, delete).

    A write may have been applied even if the response was lost, so only
    failures that happen before the request reaches the server are
    transient. Timeouts and generic I/O errors are NOT transient here.

    When a WebRequestError is in the chain its status decides: a socket
    error underneath a RECEIVE_FAILURE (reset while reading the response)
    does not make the write retryable.
    """

    def check_is_transient(self, exc: BaseException) -> bool:
        if self.is_retriable_web_error(exc, idempotent=False):
            return True
        if self.is_retriable_data_service_error(exc, idempotent=False):
            return True
        if find_inner_exception(exc, WebRequestError) is not None:
            return False
        return self.is_socket_error(exc)


class QueryErrorDetectionStrategy(MediaErrorDetectionStrategy):
    """
    Detection rules for data-service queries.

    Queries are idempotent: dropped connections, receive failures,
    timeouts and data-service errors without a response are transient.
    Generic I/O errors are not.
    """

    def check_is_transient(self, exc: BaseException) -> bool:
        return (
            self.is_retriable_web_error(exc, idempotent=True)
            or self.is_retriable_data_service_error(exc, idempotent=True)
            or self.is_socket_error(exc)
            or self.is_timeout_error(exc)
        )


class StorageTransientErrorDetectionStrategy(MediaErrorDetectionStrategy):
    """
    Detection rules for blob storage transfers.

    On top of the idempotent network rules, a storage error code from
    RETRYABLE_STORAGE_ERROR_CODES found anywhere in the exception chain
    (as StorageError.error_code or as "<code>...</code>" in a message)
    makes the failure transient regardless of HTTP status. Timeouts,
    socket errors and generic I/O errors are all transient.

    Data-service transport errors are never transient for storage.
    """

    def __init__(self, retry_on_unauthorized: bool = False):
        """
        Args:
            retry_on_unauthorized: Also retry 401/403 responses (expired SAS tokens)
        """
        self.retry_on_unauthorized = retry_on_unauthorized

    def check_is_transient(self, exc: BaseException) -> bool:
        if self.is_retriable_web_error(exc, idempotent=True, retry_on_unauthorized=self.retry_on_unauthorized):
            return True

        client_error = find_inner_exception(exc, DataServiceClientError)
        if client_error is not None and self.is_retriable_http_status_code(
            client_error.status_code, self.retry_on_unauthorized
        ):
            return True

        if self.has_retryable_error_code(exc):
            return True

        return self.is_timeout_error(exc) or self.is_socket_error(exc) or self.is_io_error(exc)

    @staticmethod
    def get_error_codes(exc: BaseException) -> list[str]:
        """Collect storage error codes from the exception chain, outermost first."""
        codes: list[str] = []
        for current in iter_exception_chain(exc):
            if isinstance(current, StorageError) and current.error_code:
                codes.append(current.error_code)
            codes.extend(_ERROR_CODE_PATTERN.findall(str(current)))
        return codes

    def has_retryable_error_code(self, exc: BaseException) -> bool:
        return any(code in RETRYABLE_STORAGE_ERROR_CODES for code in self.get_error_codes(exc))


class WebRequestTransientErrorDetectionStrategy(MediaErrorDetectionStrategy):
    """
    Detection rules for plain web requests (endpoint discovery, token calls).

    Network failures follow the idempotent rules, protocol errors the
    shared status code whitelist. Socket, timeout and generic I/O errors
    are transient. Data-service errors are not recognized here.
    """

    def check_is_transient(self, exc: BaseException) -> bool:
        return (
            self.is_retriable_web_error(exc, idempotent=True)
            or self.is_socket_error(exc)
            or self.is_timeout_error(exc)
            or self.is_io_error(exc)
        )
