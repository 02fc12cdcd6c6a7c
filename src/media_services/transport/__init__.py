"""
Transport layer: exception vocabulary and httpx error translation.

The data-service context, the blob client and plain web requests report
failures through the exceptions defined here; the retry layer's error
detection strategies classify them.
"""

from media_services.transport.errors import translate_httpx_error
from media_services.transport.exceptions import (
    DataServiceClientError,
    DataServiceQueryError,
    DataServiceRequestError,
    DataServiceResponse,
    DataServiceTransportError,
    MediaServicesError,
    StorageError,
    StorageErrorCode,
    WebErrorStatus,
    WebRequestError,
)

__all__ = [
    "DataServiceClientError",
    "DataServiceQueryError",
    "DataServiceRequestError",
    "DataServiceResponse",
    "DataServiceTransportError",
    "MediaServicesError",
    "StorageError",
    "StorageErrorCode",
    "WebErrorStatus",
    "WebRequestError",
    "translate_httpx_error",
]
