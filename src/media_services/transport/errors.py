"""
Translation of httpx exceptions into WebRequestError.

httpx reports failures through its own exception hierarchy. The error
detection strategies reason about WebErrorStatus categories, so every
httpx failure is mapped onto the category that describes where the
request broke. The httpx exception is kept as __cause__.
"""

import socket

import httpx

from media_services.transport.exceptions import (
    WebErrorStatus,
    WebRequestError,
    find_inner_exception,
)


def web_error_status_for(exc: httpx.HTTPError) -> WebErrorStatus:
    """Map an httpx exception onto the matching WebErrorStatus."""
    if isinstance(exc, httpx.HTTPStatusError):
        return WebErrorStatus.PROTOCOL_ERROR
    if isinstance(exc, httpx.TimeoutException):
        return WebErrorStatus.TIMEOUT
    if isinstance(exc, httpx.ProxyError):
        return WebErrorStatus.PROXY_NAME_RESOLUTION_FAILURE
    if isinstance(exc, httpx.ConnectError):
        # httpx folds DNS failures into ConnectError
        if find_inner_exception(exc, socket.gaierror) is not None:
            return WebErrorStatus.NAME_RESOLUTION_FAILURE
        return WebErrorStatus.CONNECT_FAILURE
    if isinstance(exc, httpx.ReadError):
        return WebErrorStatus.RECEIVE_FAILURE
    if isinstance(exc, httpx.WriteError):
        return WebErrorStatus.SEND_FAILURE
    if isinstance(exc, httpx.CloseError):
        return WebErrorStatus.CONNECTION_CLOSED
    if isinstance(exc, httpx.RemoteProtocolError):
        return WebErrorStatus.CONNECTION_CLOSED
    if isinstance(exc, (httpx.LocalProtocolError, httpx.UnsupportedProtocol)):
        return WebErrorStatus.SERVER_PROTOCOL_VIOLATION
    if isinstance(exc, httpx.TooManyRedirects):
        return WebErrorStatus.REQUEST_PROHIBITED_BY_PROXY
    return WebErrorStatus.UNKNOWN_ERROR


def translate_httpx_error(exc: httpx.HTTPError) -> WebRequestError:
    """
    Build the WebRequestError describing an httpx failure.

    The caller raises the result `from exc`; the returned error already
    has __cause__ set so it can also be inspected without raising.
    """
    status = web_error_status_for(exc)
    status_code = None
    details: dict = {"httpx_error": type(exc).__name__}

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        details["url"] = str(exc.request.url)
    else:
        try:
            details["url"] = str(exc.request.url)
        except RuntimeError:
            # .request is unset on errors raised outside a request
            pass

    error = WebRequestError(
        str(exc) or type(exc).__name__,
        status=status,
        status_code=status_code,
        details=details,
    )
    error.__cause__ = exc
    return error
