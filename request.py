"""HTTP request model and request-head parser."""

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from config import MAX_TARGET_LENGTH

ALLOWED_HTTP_VERSIONS = {"HTTP/1.1", "HTTP/1.0"}


class HTTPRequestParseError(ValueError):
    """Request head could not be parsed into a method and path."""


@dataclass(slots=True)
class HTTPRequest:
    method: str
    path: str
    http_version: str
    raw_target: str = "/"
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse the request line and headers; any body bytes are ignored."""
        header_bytes = raw.split(b"\r\n\r\n", 1)[0]
        lines = header_bytes.decode("iso-8859-1").split("\r\n")
        if not lines or not lines[0]:
            raise HTTPRequestParseError("Missing request line")

        first_line_parts = lines[0].split(" ")
        if len(first_line_parts) != 3:
            raise HTTPRequestParseError("Invalid request line")

        method, target, http_version = first_line_parts
        if not method or not target or not http_version:
            raise HTTPRequestParseError("Request line contains empty tokens")

        if http_version not in ALLOWED_HTTP_VERSIONS:
            raise HTTPRequestParseError("Unsupported HTTP version")

        if len(target) > MAX_TARGET_LENGTH:
            raise HTTPRequestParseError("Request target too long")

        path = _target_path(target)

        headers: dict[str, str] = {}
        for line in lines[1:]:
            if not line:
                continue
            if ":" not in line:
                raise HTTPRequestParseError("Malformed header line")
            name, value = line.split(":", 1)
            header_name = name.strip().lower()
            if not header_name:
                raise HTTPRequestParseError("Header name cannot be empty")
            headers[header_name] = value.strip()

        return cls(
            method=method,
            path=path,
            raw_target=target,
            http_version=http_version,
            headers=headers,
        )


def _target_path(target: str) -> str:
    """Path used for routing; only the query string is split off."""
    if target.startswith("/"):
        return target.split("?", 1)[0]

    parsed_target = urlsplit(target, allow_fragments=False)
    if parsed_target.scheme and parsed_target.netloc:
        return parsed_target.path or "/"
    return target
