"""Payload handlers for the mock completions endpoint."""

from dataclasses import dataclass

from config import UNKNOWN_REQUEST_PAYLOAD
from request import HTTPRequest


@dataclass(frozen=True, slots=True)
class ServeReply:
    """Serve the preloaded reply buffer verbatim."""

    payload: bytes

    def __call__(self, request: HTTPRequest) -> bytes:
        _ = request
        return self.payload


def unknown_request(request: HTTPRequest | None) -> bytes:
    _ = request
    return UNKNOWN_REQUEST_PAYLOAD
