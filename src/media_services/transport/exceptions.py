"""
Exceptions raised by the transport layer.

The data-service context, the blob client and plain web requests all
report failures through these types. The error detection strategies in
media_services.retry.detection inspect them (status, HTTP status code,
storage error code) to decide whether an operation is worth retrying.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

E = TypeVar("E", bound=BaseException)


class WebErrorStatus(str, Enum):
    """Network failure category of a web request."""

    SUCCESS = "success"
    NAME_RESOLUTION_FAILURE = "name_resolution_failure"
    CONNECT_FAILURE = "connect_failure"
    RECEIVE_FAILURE = "receive_failure"
    SEND_FAILURE = "send_failure"
    PIPELINE_FAILURE = "pipeline_failure"
    REQUEST_CANCELED = "request_canceled"
    PROTOCOL_ERROR = "protocol_error"
    CONNECTION_CLOSED = "connection_closed"
    TRUST_FAILURE = "trust_failure"
    SECURE_CHANNEL_FAILURE = "secure_channel_failure"
    SERVER_PROTOCOL_VIOLATION = "server_protocol_violation"
    KEEP_ALIVE_FAILURE = "keep_alive_failure"
    PENDING = "pending"
    TIMEOUT = "timeout"
    PROXY_NAME_RESOLUTION_FAILURE = "proxy_name_resolution_failure"
    UNKNOWN_ERROR = "unknown_error"
    MESSAGE_LENGTH_LIMIT_EXCEEDED = "message_length_limit_exceeded"
    CACHE_ENTRY_NOT_FOUND = "cache_entry_not_found"
    REQUEST_PROHIBITED_BY_CACHE_POLICY = "request_prohibited_by_cache_policy"
    REQUEST_PROHIBITED_BY_PROXY = "request_prohibited_by_proxy"


class StorageErrorCode:
    """Error code strings returned by the storage and table services."""

    # Storage service
    UNSUPPORTED_HTTP_VERB = "UnsupportedHttpVerb"
    MISSING_CONTENT_LENGTH_HEADER = "MissingContentLengthHeader"
    MISSING_REQUIRED_HEADER = "MissingRequiredHeader"
    UNSUPPORTED_HEADER = "UnsupportedHeader"
    INVALID_HEADER_VALUE = "InvalidHeaderValue"
    MD5_MISMATCH = "Md5Mismatch"
    INVALID_MD5 = "InvalidMd5"
    OUT_OF_RANGE_INPUT = "OutOfRangeInput"
    INVALID_INPUT = "InvalidInput"
    INTERNAL_ERROR = "InternalError"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    INVALID_METADATA = "InvalidMetadata"
    METADATA_TOO_LARGE = "MetadataTooLarge"
    CONDITION_NOT_MET = "ConditionNotMet"
    INVALID_RANGE = "InvalidRange"
    CONTAINER_NOT_FOUND = "ContainerNotFound"
    CONTAINER_ALREADY_EXISTS = "ContainerAlreadyExists"
    CONTAINER_DISABLED = "ContainerDisabled"
    CONTAINER_BEING_DELETED = "ContainerBeingDeleted"
    SERVER_BUSY = "ServerBusy"
    REQUEST_BODY_TOO_LARGE = "RequestBodyTooLarge"
    INVALID_QUERY_PARAMETER_VALUE = "InvalidQueryParameterValue"
    OPERATION_TIMED_OUT = "OperationTimedOut"
    INVALID_RESOURCE_NAME = "InvalidResourceName"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    ACCOUNT_IS_DISABLED = "AccountIsDisabled"
    INSUFFICIENT_ACCOUNT_PERMISSIONS = "InsufficientAccountPermissions"
    BLOB_NOT_FOUND = "BlobNotFound"
    LEASE_ID_MISSING = "LeaseIdMissing"

    # Table service
    TABLE_SERVER_OUT_OF_MEMORY = "TableServerOutOfMemory"
    TABLE_NOT_FOUND = "TableNotFound"
    TABLE_ALREADY_EXISTS = "TableAlreadyExists"
    ENTITY_ALREADY_EXISTS = "EntityAlreadyExists"
    ENTITY_TOO_LARGE = "EntityTooLarge"
    DUPLICATE_PROPERTIES_SPECIFIED = "DuplicatePropertiesSpecified"
    PROPERTIES_NEED_VALUE = "PropertiesNeedValue"
    UPDATE_CONDITION_NOT_SATISFIED = "UpdateConditionNotSatisfied"

    @classmethod
    def all_codes(cls) -> list[str]:
        """Every error code string defined on this class."""
        return [
            value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        ]


class MediaServicesError(Exception):
    """
    Base exception for all transport-level errors.

    All transport exceptions inherit from this to allow catching any
    client failure with a single except clause.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class WebRequestError(MediaServicesError):
    """
    Raised when a plain web request fails.

    `status` tells where the request failed (DNS, connect, send, receive...).
    For PROTOCOL_ERROR the server answered and `status_code` carries the
    HTTP status, or is None when no response could be read.
    """

    def __init__(
        self,
        message: str,
        status: WebErrorStatus = WebErrorStatus.UNKNOWN_ERROR,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.status_code = status_code


class DataServiceTransportError(MediaServicesError):
    """
    Raised by the data-service context when the HTTP exchange fails.

    `status_code` is None when no response was received.
    """

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class DataServiceClientError(MediaServicesError):
    """Raised when the data service answers a request with an error status."""

    def __init__(self, message: str, status_code: int, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


@dataclass(frozen=True)
class DataServiceResponse:
    """
    Response of a save-changes request.

    Batch requests report a single `batch_status_code`; non-batch
    requests report one status code per changed entity.
    """

    status_codes: list[int] = field(default_factory=list)
    batch_status_code: int | None = None

    @property
    def is_batch_response(self) -> bool:
        return self.batch_status_code is not None


class DataServiceRequestError(MediaServicesError):
    """Raised when saving changes to the data service fails."""

    def __init__(
        self,
        message: str,
        response: DataServiceResponse | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.response = response


class DataServiceQueryError(MediaServicesError):
    """Raised when a data-service query fails. `status_code` is None without a response."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class StorageError(MediaServicesError):
    """
    Raised by the blob storage client.

    `error_code` is the machine-readable code from the service's extended
    error information (see StorageErrorCode), when the service sent one.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.error_code = error_code
        self.status_code = status_code


def iter_exception_chain(exc: BaseException | None) -> Iterator[BaseException]:
    """
    Yield an exception followed by everything it explicitly wraps.

    Follows __cause__ (set by `raise ... from ...`) and the members of
    exception groups. The implicit __context__ is not followed: an error
    raised while handling another one does not wrap it. Each exception is
    yielded once, so cyclic chains terminate.
    """
    seen: set[int] = set()
    stack: list[BaseException | None] = [exc]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current

        stack.append(current.__cause__)
        if isinstance(current, BaseExceptionGroup):
            stack.extend(reversed(current.exceptions))


def find_inner_exception(
    exc: BaseException | None,
    exc_type: type[E] | tuple[type[E], ...],
) -> E | None:
    """Return the first exception of `exc_type` in the chain of `exc`, or None."""
    for current in iter_exception_chain(exc):
        if isinstance(current, exc_type):
            return current
    return None
