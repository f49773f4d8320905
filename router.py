"""Routing table for method/path handlers."""

from collections.abc import Callable

from request import HTTPRequest

Handler = Callable[[HTTPRequest], bytes]


class Router:
    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Handler] = {}

    def add_route(self, method: str, path: str, handler: Handler) -> None:
        if not method.strip():
            raise ValueError("method cannot be empty")
        if not path.startswith("/"):
            raise ValueError("path must start with '/'")
        self._routes[(method, path)] = handler

    def resolve(self, method: str, path: str) -> Handler | None:
        """Exact, case-sensitive lookup; no method or path normalization."""
        return self._routes.get((method, path))

    def __len__(self) -> int:
        return len(self._routes)
