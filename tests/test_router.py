"""Unit tests for method/path router behavior."""

from handlers.mock_handlers import ServeReply, unknown_request
from request import HTTPRequest
from router import Router


def _request(method: str, path: str) -> HTTPRequest:
    return HTTPRequest(method=method, path=path, http_version="HTTP/1.1", raw_target=path)


def test_router_resolves_exact_method_and_path() -> None:
    handler = ServeReply(b"canned")
    router = Router()
    router.add_route("POST", "/v1/chat/completions", handler)

    resolved = router.resolve("POST", "/v1/chat/completions")

    assert resolved is handler
    assert resolved(_request("POST", "/v1/chat/completions")) == b"canned"


def test_router_is_case_sensitive() -> None:
    router = Router()
    router.add_route("POST", "/v1/chat/completions", ServeReply(b"canned"))

    assert router.resolve("post", "/v1/chat/completions") is None
    assert router.resolve("POST", "/V1/chat/completions") is None


def test_router_does_not_normalize_paths() -> None:
    router = Router()
    router.add_route("POST", "/v1/chat/completions", ServeReply(b"canned"))

    assert router.resolve("POST", "/v1/chat/completions/") is None
    assert router.resolve("POST", "/v1//chat/completions") is None
    assert router.resolve("GET", "/v1/chat/completions") is None


def test_router_supports_additional_routes() -> None:
    router = Router()
    router.add_route("POST", "/v1/chat/completions", ServeReply(b"chat"))
    router.add_route("POST", "/v1/completions", ServeReply(b"legacy"))

    assert len(router) == 2
    assert router.resolve("POST", "/v1/completions")(_request("POST", "/")) == b"legacy"


def test_unknown_request_payload() -> None:
    assert unknown_request(None) == b"Unknown request"
    assert unknown_request(_request("GET", "/")) == b"Unknown request"


def test_router_rejects_invalid_path() -> None:
    router = Router()

    try:
        router.add_route("POST", "missing-slash", ServeReply(b""))
    except ValueError as exc:
        assert "path must start" in str(exc)
    else:
        raise AssertionError("Expected ValueError for invalid route path")
