"""Mock completions endpoint: listener, raw-connection responder and CLI entry point."""

from __future__ import annotations

import argparse
import json
import logging
import re
import socket
import threading
import time

from config import (
    ACCEPT_TIMEOUT_SECS,
    LOG_FORMAT,
    PORT,
    REPLY_FILE,
    SOCKET_TIMEOUT_SECS,
    TRIGGER_METHOD,
    TRIGGER_PATH,
    MockConfig,
)
from connection import (
    ClientAddress,
    HijackableConnection,
    HijackError,
    HijackNotSupportedError,
    ResponseWriter,
    take_over,
)
from handlers.mock_handlers import ServeReply, unknown_request
from reply_loader import load_reply_or_empty
from request import HTTPRequest, HTTPRequestParseError
from response import internal_error
from router import Router
from socket_handler import HTTPReadError, read_http_request_message, write_raw_payload

logger = logging.getLogger(__name__)

PORT_PATTERN = re.compile(r"[+-]?[0-9]+")


class MockServer:
    def __init__(self, config: MockConfig | None = None, router: Router | None = None) -> None:
        self.config = config or MockConfig()
        self.host = self.config.host
        self.port = self.config.port
        self.router = router or self._build_default_router()

        self._server_socket: socket.socket | None = None
        self._next_connection_id = 0
        self._running = False

    def _build_default_router(self) -> Router:
        router = Router()
        router.add_route(TRIGGER_METHOD, TRIGGER_PATH, ServeReply(self.config.reply))
        return router

    def start(self) -> None:
        """Bind, listen and hand every accepted client to its own thread."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(128)
            server_socket.settimeout(ACCEPT_TIMEOUT_SECS)
            self.port = server_socket.getsockname()[1]
            logger.info("Starting Mock Server listening to %d", self.port)

            self._running = True
            while self._running:
                try:
                    client_socket, address = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break

                self._next_connection_id += 1
                worker = threading.Thread(
                    target=self._handle_client,
                    args=(client_socket, address),
                    name=f"mock-conn-{self._next_connection_id}",
                    daemon=True,
                )
                worker.start()

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None

    def _wrap_connection(
        self, client_socket: socket.socket, address: ClientAddress
    ) -> ResponseWriter:
        if self.config.allow_hijack:
            return HijackableConnection(client_socket, address)
        return ResponseWriter(client_socket, address)

    def _handle_client(self, client_socket: socket.socket, address: ClientAddress) -> None:
        started_at = time.perf_counter()
        with self._wrap_connection(client_socket, address) as connection:
            client_socket.settimeout(SOCKET_TIMEOUT_SECS)
            request: HTTPRequest | None = None
            try:
                raw_request = read_http_request_message(client_socket)
            except HTTPReadError as exc:
                logger.info("Unreadable request from %s: %s", address[0], exc)
                raw_request = None
            except OSError as exc:
                logger.debug("Connection from %s dropped while reading: %s", address[0], exc)
                return

            if raw_request == b"":
                return

            if raw_request is not None:
                try:
                    request = HTTPRequest.from_bytes(raw_request)
                except HTTPRequestParseError as exc:
                    logger.info("Malformed request from %s: %s", address[0], exc)

            payload, outcome = self._select_payload(request)
            self._respond(connection, request, payload, outcome, started_at)

    def _select_payload(self, request: HTTPRequest | None) -> tuple[bytes, str]:
        if request is None:
            return unknown_request(None), "unknown"

        logger.info("Received request for host %s and url %s", request.host, request.raw_target)
        handler = self.router.resolve(request.method, request.path)
        if handler is None:
            return unknown_request(request), "unknown"
        return handler(request), "reply"

    def _respond(
        self,
        connection: ResponseWriter,
        request: HTTPRequest | None,
        payload: bytes,
        outcome: str,
        started_at: float,
    ) -> None:
        try:
            raw_socket = take_over(connection)
        except HijackError as exc:
            if isinstance(exc, HijackNotSupportedError):
                outcome = "hijack_unsupported"
            else:
                outcome = "hijack_failed"
            logger.error("Connection takeover failed: %s", exc)
            bytes_sent = 0
            try:
                bytes_sent = connection.send_response(internal_error(str(exc)))
            except (HijackError, OSError) as send_exc:
                logger.debug("Could not report takeover failure: %s", send_exc)
            self._log_outcome(connection.address, request, outcome, bytes_sent, started_at)
            return

        with raw_socket:
            if self.config.echo_payload:
                print(payload.decode("utf-8", errors="replace"), flush=True)
            try:
                bytes_sent = write_raw_payload(raw_socket, payload)
            except OSError as exc:
                logger.debug("Raw write to %s failed: %s", connection.address[0], exc)
                outcome = "write_failed"
                bytes_sent = 0

        self._log_outcome(connection.address, request, outcome, bytes_sent, started_at)
        logger.debug("End of handler")

    def _log_outcome(
        self,
        address: ClientAddress,
        request: HTTPRequest | None,
        outcome: str,
        bytes_out: int,
        started_at: float,
    ) -> None:
        duration_ms = (time.perf_counter() - started_at) * 1000
        event = {
            "client": address[0],
            "method": request.method if request is not None else "-",
            "path": request.path if request is not None else "-",
            "outcome": outcome,
            "bytes_out": bytes_out,
            "latency_ms": round(duration_ms, 3),
        }
        if self.config.log_format == "json":
            logger.info(json.dumps(event, sort_keys=True))
            return

        logger.info(
            "client=%s method=%s path=%s outcome=%s bytes_out=%s duration_ms=%.2f",
            event["client"],
            event["method"],
            event["path"],
            event["outcome"],
            event["bytes_out"],
            duration_ms,
        )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run mock chat completions endpoint")
    parser.add_argument("port", nargs="?", default=None, help=f"listen port (default {PORT})")
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    parser.add_argument("--quiet", action="store_true", help="do not echo payloads to stdout")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    port = PORT
    if args.port is not None:
        if PORT_PATTERN.fullmatch(args.port) is None:
            logger.error("Cannot parse argument %s", args.port)
            return 1
        port = int(args.port, 10)
        if not 0 <= port <= 65535:
            logger.error("Port out of range: %s", args.port)
            return 1

    config = MockConfig(
        port=port,
        reply=load_reply_or_empty(REPLY_FILE),
        log_format=args.log_format,
        echo_payload=not args.quiet,
    )
    server = MockServer(config)
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
    except OSError as exc:
        logger.critical("Listener failed on port %d: %s", port, exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
