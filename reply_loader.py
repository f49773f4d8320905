"""Load the canned reply file served for trigger requests."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from config import REPLY_FILE

logger = logging.getLogger(__name__)


class ReplyLoadError(OSError):
    """Raised when the reply file cannot be opened, inspected, or read."""


class IncompleteReadError(ReplyLoadError):
    """Raised when fewer bytes were read than the file reported."""

    def __init__(self, path: Path, expected: int, received: int) -> None:
        super().__init__(f"Read {received} of {expected} bytes from {path}")
        self.expected = expected
        self.received = received


def load_reply(path: str | Path = REPLY_FILE) -> bytes:
    """Read the whole reply file, failing if it shrinks while being read."""
    reply_path = Path(path)
    try:
        with reply_path.open("rb") as file_obj:
            expected_size = os.fstat(file_obj.fileno()).st_size
            buffer = bytearray(expected_size)
            view = memoryview(buffer)
            received = 0
            while received < expected_size:
                count = file_obj.readinto(view[received:])
                if not count:
                    break
                received += count
    except OSError as exc:
        raise ReplyLoadError(f"Cannot read reply file {reply_path}: {exc}") from exc

    if received != expected_size:
        raise IncompleteReadError(reply_path, expected_size, received)
    return bytes(buffer)


def load_reply_or_empty(path: str | Path = REPLY_FILE) -> bytes:
    try:
        reply = load_reply(path)
    except ReplyLoadError as exc:
        logger.warning("Serving empty reply: %s", exc)
        return b""
    logger.info("Loaded %d reply bytes from %s", len(reply), path)
    return reply
