"""Unit tests for HTTP request-head parsing."""

import pytest

from request import HTTPRequest


def test_parse_trigger_request_with_body() -> None:
    raw = (
        b"POST /v1/chat/completions HTTP/1.1\r\n"
        b"Content-Type: application/json\r\n"
        b"Host: api.openai.com\r\n"
        b"Content-Length: 2\r\n"
        b"\r\n"
        b"{}"
    )

    request = HTTPRequest.from_bytes(raw)

    assert request.method == "POST"
    assert request.path == "/v1/chat/completions"
    assert request.http_version == "HTTP/1.1"
    assert request.host == "api.openai.com"
    assert request.headers["content-length"] == "2"


def test_method_case_is_preserved() -> None:
    request = HTTPRequest.from_bytes(b"post / HTTP/1.1\r\nHost: localhost\r\n\r\n")

    assert request.method == "post"


def test_query_string_is_split_from_path() -> None:
    request = HTTPRequest.from_bytes(
        b"POST /v1/chat/completions?stream=false HTTP/1.1\r\nHost: x\r\n\r\n"
    )

    assert request.path == "/v1/chat/completions"
    assert request.raw_target == "/v1/chat/completions?stream=false"


def test_missing_host_header_gives_empty_host() -> None:
    request = HTTPRequest.from_bytes(b"GET / HTTP/1.0\r\n\r\n")

    assert request.host == ""


def test_parse_invalid_request_line_raises_value_error() -> None:
    raw = b"BROKEN-LINE\r\nHost: localhost\r\n\r\n"

    with pytest.raises(ValueError, match="Invalid request line"):
        HTTPRequest.from_bytes(raw)


def test_parse_unsupported_version_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Unsupported HTTP version"):
        HTTPRequest.from_bytes(b"GET / HTTP/2.0\r\n\r\n")


def test_parse_malformed_header_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Malformed header line"):
        HTTPRequest.from_bytes(b"GET / HTTP/1.1\r\nno-colon-here\r\n\r\n")


@pytest.mark.parametrize(
    ("target", "expected_path"),
    [
        ("//host/v1/chat/completions", "//host/v1/chat/completions"),
        ("/v1/chat/completions#x", "/v1/chat/completions#x"),
        ("/./v1/chat/completions", "/./v1/chat/completions"),
        ("/v1/chat/completions?a=1#x", "/v1/chat/completions"),
        ("http://api.openai.com/v1/chat/completions?a=1", "/v1/chat/completions"),
        ("*", "*"),
    ],
)
def test_path_is_not_normalized(target: str, expected_path: str) -> None:
    raw = f"POST {target} HTTP/1.1\r\nHost: x\r\n\r\n".encode("ascii")

    request = HTTPRequest.from_bytes(raw)

    assert request.path == expected_path
    assert request.raw_target == target
