"""Unit tests for httpx error translation."""

import socket

import httpx
import pytest

from media_services.retry.detection import (
    SaveChangesErrorDetectionStrategy,
    WebRequestTransientErrorDetectionStrategy,
)
from media_services.transport.errors import translate_httpx_error, web_error_status_for
from media_services.transport.exceptions import MediaServicesError, WebErrorStatus, WebRequestError

REQUEST = httpx.Request("GET", "https://media.example.net/api/")


def status_error(status_code: int) -> httpx.HTTPStatusError:
    response = httpx.Response(status_code, request=REQUEST)
    return httpx.HTTPStatusError(f"Server error '{status_code}'", request=REQUEST, response=response)


class TestWebErrorStatusMapping:
    """Test the httpx exception -> WebErrorStatus mapping."""

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (httpx.ConnectError("refused", request=REQUEST), WebErrorStatus.CONNECT_FAILURE),
            (httpx.ConnectTimeout("timed out", request=REQUEST), WebErrorStatus.TIMEOUT),
            (httpx.ReadTimeout("timed out", request=REQUEST), WebErrorStatus.TIMEOUT),
            (httpx.WriteTimeout("timed out", request=REQUEST), WebErrorStatus.TIMEOUT),
            (httpx.PoolTimeout("timed out", request=REQUEST), WebErrorStatus.TIMEOUT),
            (httpx.ProxyError("proxy unreachable", request=REQUEST), WebErrorStatus.PROXY_NAME_RESOLUTION_FAILURE),
            (httpx.ReadError("connection reset", request=REQUEST), WebErrorStatus.RECEIVE_FAILURE),
            (httpx.WriteError("broken pipe", request=REQUEST), WebErrorStatus.SEND_FAILURE),
            (httpx.CloseError("close failed", request=REQUEST), WebErrorStatus.CONNECTION_CLOSED),
            (httpx.RemoteProtocolError("server disconnected", request=REQUEST), WebErrorStatus.CONNECTION_CLOSED),
            (httpx.LocalProtocolError("bad header", request=REQUEST), WebErrorStatus.SERVER_PROTOCOL_VIOLATION),
            (httpx.UnsupportedProtocol("ftp://", request=REQUEST), WebErrorStatus.SERVER_PROTOCOL_VIOLATION),
            (httpx.TooManyRedirects("loop", request=REQUEST), WebErrorStatus.REQUEST_PROHIBITED_BY_PROXY),
            (httpx.DecodingError("bad gzip", request=REQUEST), WebErrorStatus.UNKNOWN_ERROR),
            (status_error(503), WebErrorStatus.PROTOCOL_ERROR),
        ],
    )
    def test_mapping(self, exc, expected):
        assert web_error_status_for(exc) == expected

    def test_dns_failure_is_name_resolution(self):
        exc = httpx.ConnectError("[Errno -2] Name or service not known", request=REQUEST)
        exc.__cause__ = socket.gaierror(-2, "Name or service not known")

        assert web_error_status_for(exc) == WebErrorStatus.NAME_RESOLUTION_FAILURE


class TestTranslateHttpxError:
    """Test WebRequestError construction."""

    def test_status_error_keeps_status_code(self):
        exc = status_error(502)

        error = translate_httpx_error(exc)

        assert isinstance(error, WebRequestError)
        assert isinstance(error, MediaServicesError)
        assert error.status == WebErrorStatus.PROTOCOL_ERROR
        assert error.status_code == 502
        assert error.__cause__ is exc
        assert error.details == {"httpx_error": "HTTPStatusError", "url": "https://media.example.net/api/"}

    def test_network_error_has_no_status_code(self):
        exc = httpx.ReadError("connection reset", request=REQUEST)

        error = translate_httpx_error(exc)

        assert error.status == WebErrorStatus.RECEIVE_FAILURE
        assert error.status_code is None
        assert error.message == "connection reset"
        assert error.details["url"] == "https://media.example.net/api/"

    def test_error_without_request(self):
        """Errors raised outside a request have no URL to report."""
        error = translate_httpx_error(httpx.ConnectError("refused"))

        assert error.status == WebErrorStatus.CONNECT_FAILURE
        assert "url" not in error.details

    def test_empty_message_falls_back_to_type_name(self):
        error = translate_httpx_error(httpx.ReadTimeout("", request=REQUEST))
        assert error.message == "ReadTimeout"

    def test_reset_while_reading_is_not_retried_for_save(self):
        exc = httpx.ReadError("[Errno 104] Connection reset by peer", request=REQUEST)
        exc.__cause__ = ConnectionResetError(104, "Connection reset by peer")

        error = translate_httpx_error(exc)

        assert error.status == WebErrorStatus.RECEIVE_FAILURE
        assert SaveChangesErrorDetectionStrategy().is_transient(error) is False
        assert WebRequestTransientErrorDetectionStrategy().is_transient(error) is True

    @pytest.mark.parametrize(
        "exc,save_transient,web_transient",
        [
            (httpx.ConnectError("refused", request=REQUEST), True, True),
            (httpx.WriteError("broken pipe", request=REQUEST), True, True),
            (httpx.ReadTimeout("timed out", request=REQUEST), False, True),
            (httpx.RemoteProtocolError("server disconnected", request=REQUEST), False, True),
            (status_error(503), True, True),
            (status_error(404), False, False),
            (httpx.LocalProtocolError("bad header", request=REQUEST), False, False),
        ],
    )
    def test_translated_errors_are_classified(self, exc, save_transient, web_transient):
        error = translate_httpx_error(exc)

        assert SaveChangesErrorDetectionStrategy().is_transient(error) is save_transient
        assert WebRequestTransientErrorDetectionStrategy().is_transient(error) is web_transient
