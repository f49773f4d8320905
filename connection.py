"""Accepted client connections and the optional raw takeover capability."""

from __future__ import annotations

import socket
from typing import Protocol, runtime_checkable

from response import HTTPResponse
from socket_handler import write_http_response

ClientAddress = tuple[str, int]


class HijackError(Exception):
    """Raised when raw access to a connection cannot be handed over."""


class HijackNotSupportedError(HijackError):
    """Raised when a connection offers no raw takeover capability."""


@runtime_checkable
class Hijacker(Protocol):
    def hijack(self) -> socket.socket: ...


class ResponseWriter:
    """Structured response path over an accepted socket."""

    def __init__(self, client_socket: socket.socket, address: ClientAddress) -> None:
        self.socket = client_socket
        self.address = address
        self._hijacked = False

    @property
    def hijacked(self) -> bool:
        return self._hijacked

    def send_response(self, response: HTTPResponse) -> int:
        if self._hijacked:
            raise HijackError("cannot write a response on a hijacked connection")
        return write_http_response(self.socket, response)

    def close(self) -> None:
        # Once hijacked, closing belongs to whoever took the socket.
        if not self._hijacked:
            self.socket.close()

    def __enter__(self) -> "ResponseWriter":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()


class HijackableConnection(ResponseWriter):
    """Connection that can hand its raw socket to the caller exactly once."""

    def hijack(self) -> socket.socket:
        if self._hijacked:
            raise HijackError("connection has already been hijacked")
        try:
            self.socket.getpeername()
        except OSError as exc:
            raise HijackError(f"cannot hijack connection: {exc}") from exc
        self._hijacked = True
        return self.socket


def take_over(connection: ResponseWriter) -> socket.socket:
    """Return the raw socket behind ``connection`` or raise ``HijackError``."""
    if not isinstance(connection, Hijacker):
        raise HijackNotSupportedError("webserver doesn't support hijacking")
    return connection.hijack()
