"""
Unit tests for HTTP response serialization.
"""

import pytest

from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    not_found,
    internal_error,
)


class TestHTTPResponse:
    """Tests for HTTPResponse.to_bytes()."""

    def test_exact_layout(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"Content-Type": "text/plain", "Content-Length": "5"},
            body=b"hello",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_no_headers_no_body(self):
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"
        assert (HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR).status_line
                == "HTTP/1.1 500 Internal Server Error")

    def test_content_length_added_for_non_empty_body(self):
        response = HTTPResponse(headers={"X-One": "1"}, body=b"abc")

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nX-One: 1\r\nContent-Length: 3\r\n\r\nabc"
        assert "Content-Length" not in response.headers  # original untouched

    def test_no_date_or_server_header(self):
        """Output depends only on the response object."""
        result = HTTPResponse(body=b"x").to_bytes()

        assert b"Date:" not in result
        assert b"Server:" not in result
        assert result == HTTPResponse(body=b"x").to_bytes()

    def test_header_order_is_insertion_order(self):
        response = HTTPResponse(headers={"B": "2", "A": "1"})
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nB: 2\r\nA: 1\r\n\r\n"

    def test_set_body_encodes_str(self):
        response = HTTPResponse().set_header("X", "y").set_body("héllo")
        assert response.body == "héllo".encode("utf-8")


class TestResponseBuilder:
    """Tests for ResponseBuilder."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()
        assert response.status == HTTPStatus.NOT_FOUND
        assert response.headers == {}
        assert response.body == b""

    def test_text(self):
        response = ResponseBuilder().text("abc").build()
        assert response.headers == {"Content-Type": "text/plain", "Content-Length": "3"}
        assert response.body == b"abc"

    def test_text_counts_bytes_not_characters(self):
        response = ResponseBuilder().text("é").build()
        assert response.headers["Content-Length"] == "2"

    def test_empty_text_keeps_content_length(self):
        response = ResponseBuilder().text("").build()
        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 0\r\n\r\n"
        )

    def test_octet_stream(self):
        response = ResponseBuilder().octet_stream(b"\x00\x01").build()
        assert response.headers == {
            "Content-Type": "application/octet-stream",
            "Content-Length": "2",
        }

    def test_empty_body_drops_content_length(self):
        response = ResponseBuilder().body("abc").body("").build()
        assert "Content-Length" not in response.headers

    def test_build_copies_headers(self):
        builder = ResponseBuilder().header("X-A", "1")
        first = builder.build()
        builder.header("X-B", "2")

        assert first.headers == {"X-A": "1"}

    def test_to_bytes_shortcut(self):
        assert ResponseBuilder().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"


class TestConvenienceFunctions:
    """Tests for ok(), not_found(), internal_error()."""

    def test_ok_without_body(self):
        assert ok().to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_ok_with_text(self):
        assert ok("abc123").to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 6\r\n"
            b"\r\n"
            b"abc123"
        )

    def test_ok_with_bytes(self):
        response = ok(b"data")
        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.headers["Content-Length"] == "4"

    def test_ok_with_bytes_and_content_type(self):
        response = ok(b"{}", content_type="application/json")
        assert response.headers["Content-Type"] == "application/json"

    def test_not_found(self):
        assert not_found().to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_internal_error(self):
        assert internal_error().to_bytes() == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"

    def test_surrogate_escaped_text_round_trips(self):
        text = b"\xff\xfe".decode("utf-8", "surrogateescape")
        response = ok(text)

        assert response.body == b"\xff\xfe"
        assert response.headers["Content-Length"] == "2"


class TestHTTPStatus:

    @pytest.mark.parametrize("status,phrase", [
        (HTTPStatus.OK, "OK"),
        (HTTPStatus.NOT_FOUND, "Not Found"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error"),
    ])
    def test_phrase(self, status: HTTPStatus, phrase: str):
        assert status.phrase == phrase

    def test_classification(self):
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.OK.is_error
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
