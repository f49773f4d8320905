"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket

from config import BUFFER_SIZE, MAX_BODY_BYTES, MAX_HEADER_BYTES, READ_CHUNK_SIZE
from response import HTTPResponse


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""


class MalformedRequestError(HTTPReadError):
    """Raised when socket bytes do not form a complete HTTP request."""


class HeaderTooLargeError(HTTPReadError):
    """Raised when HTTP headers exceed configured maximum size."""


class PayloadTooLargeError(HTTPReadError):
    """Raised when request body exceeds configured maximum size."""


class SocketTimeoutError(HTTPReadError):
    """Raised when a client times out while sending request bytes."""


def _extract_content_length(header_bytes: bytes) -> int:
    headers = header_bytes.decode("iso-8859-1").split("\r\n")
    for line in headers[1:]:
        if not line:
            continue
        if ":" not in line:
            raise MalformedRequestError("Malformed header while reading request")
        name, value = line.split(":", 1)
        if name.strip().lower() == "content-length":
            try:
                parsed_length = int(value.strip())
            except ValueError as exc:
                raise MalformedRequestError("Invalid Content-Length header") from exc
            if parsed_length < 0:
                raise MalformedRequestError("Negative Content-Length header")
            return parsed_length
    return 0


def _extract_transfer_encoding(header_bytes: bytes) -> str | None:
    headers = header_bytes.decode("iso-8859-1").split("\r\n")
    for line in headers[1:]:
        if not line:
            continue
        if ":" not in line:
            raise MalformedRequestError("Malformed header while reading request")
        name, value = line.split(":", 1)
        if name.strip().lower() == "transfer-encoding":
            return value.strip().lower()
    return None


def _chunked_body_complete_length(encoded_body: bytes) -> int | None:
    """Length of a complete chunked body including trailers, or None if incomplete."""
    position = 0
    decoded_size = 0
    while True:
        line_end = encoded_body.find(b"\r\n", position)
        if line_end == -1:
            if len(encoded_body) - position > MAX_HEADER_BYTES:
                raise MalformedRequestError("Chunk size line too long")
            return None
        size_token = encoded_body[position:line_end].split(b";", 1)[0].strip()
        if not size_token:
            raise MalformedRequestError("Missing chunk size")
        try:
            chunk_size = int(size_token, 16)
        except ValueError as exc:
            raise MalformedRequestError("Malformed chunk size") from exc
        if chunk_size < 0:
            raise MalformedRequestError("Malformed chunk size")
        position = line_end + 2

        if chunk_size == 0:
            while True:
                trailer_end = encoded_body.find(b"\r\n", position)
                if trailer_end == -1:
                    if len(encoded_body) - position > MAX_HEADER_BYTES:
                        raise HeaderTooLargeError("Chunked trailers exceeded MAX_HEADER_BYTES")
                    return None
                if trailer_end == position:
                    return trailer_end + 2
                if b":" not in encoded_body[position:trailer_end]:
                    raise MalformedRequestError("Malformed chunked trailer")
                position = trailer_end + 2

        decoded_size += chunk_size
        if decoded_size > MAX_BODY_BYTES:
            raise PayloadTooLargeError("Decoded chunked body exceeded MAX_BODY_BYTES")
        if len(encoded_body) < position + chunk_size + 2:
            return None
        if encoded_body[position + chunk_size : position + chunk_size + 2] != b"\r\n":
            raise MalformedRequestError("Chunk missing CRLF terminator")
        position += chunk_size + 2


def extract_http_request_message(buffer: bytes) -> bytes | None:
    """Return one complete request (head plus drained body), if buffered."""
    header_end_index = buffer.find(b"\r\n\r\n")
    if header_end_index == -1:
        if len(buffer) > MAX_HEADER_BYTES:
            raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")
        return None

    if header_end_index + 4 > MAX_HEADER_BYTES:
        raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")

    header_bytes = buffer[:header_end_index]
    body_start = header_end_index + 4
    transfer_encoding = _extract_transfer_encoding(header_bytes)
    if transfer_encoding is not None and "chunked" in transfer_encoding:
        complete_body_length = _chunked_body_complete_length(buffer[body_start:])
        if complete_body_length is None:
            return None
        return buffer[: body_start + complete_body_length]

    expected_body_length = _extract_content_length(header_bytes)
    if expected_body_length > MAX_BODY_BYTES:
        raise PayloadTooLargeError("Body exceeded MAX_BODY_BYTES")

    request_length = body_start + expected_body_length
    if len(buffer) < request_length:
        return None
    return buffer[:request_length]


def read_http_request_message(client_socket: socket.socket) -> bytes:
    """Read one request from the socket; returns b"" if the peer sent nothing."""
    buffer = bytearray()

    while True:
        extracted = extract_http_request_message(bytes(buffer))
        if extracted is not None:
            return extracted

        try:
            chunk = client_socket.recv(max(BUFFER_SIZE, READ_CHUNK_SIZE))
        except socket.timeout as exc:
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc

        if not chunk:
            if not buffer:
                return b""
            raise MalformedRequestError("Connection closed before request completed")

        buffer.extend(chunk)


def write_raw_payload(client_socket: socket.socket, payload: bytes) -> int:
    """Write payload bytes exactly as given, with no HTTP framing."""
    if payload:
        client_socket.sendall(payload)
    return len(payload)


def write_http_response(client_socket: socket.socket, response: HTTPResponse) -> int:
    """Serialize and write a structured HTTP response."""
    payload = response.to_bytes()
    client_socket.sendall(payload)
    return len(payload)
