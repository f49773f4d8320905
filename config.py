"""Configuration constants for the mock completions endpoint."""

from dataclasses import dataclass

HOST: str = "0.0.0.0"
PORT: int = 80
REPLY_FILE: str = "reply.txt"
TRIGGER_METHOD: str = "POST"
TRIGGER_PATH: str = "/v1/chat/completions"
UNKNOWN_REQUEST_PAYLOAD: bytes = b"Unknown request"
BUFFER_SIZE: int = 1024
READ_CHUNK_SIZE: int = 65_536
SOCKET_TIMEOUT_SECS: int = 5
ACCEPT_TIMEOUT_SECS: float = 0.2
MAX_HEADER_BYTES: int = 16_384
MAX_BODY_BYTES: int = 1_048_576
MAX_TARGET_LENGTH: int = 8_192
LOG_FORMAT: str = "plain"
SERVER_NAME: str = "mockprox"


@dataclass(frozen=True, slots=True)
class MockConfig:
    """Run-time settings built once at startup and shared read-only."""

    host: str = HOST
    port: int = PORT
    reply: bytes = b""
    log_format: str = LOG_FORMAT
    echo_payload: bool = True
    allow_hijack: bool = True
