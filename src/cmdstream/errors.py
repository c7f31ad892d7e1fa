from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    BAD_FILE = "bad_file"
    UNSUPPORTED_URI = "unsupported_uri"
    STREAM_EXHAUSTED = "stream_exhausted"
    STREAM_CORRUPT = "stream_corrupt"
    INTERNAL = "internal"


class CommandStreamError(Exception):
    """Base error for object streams, carrying the resource name and a reason."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        msg = f"{self.kind.value}: {name}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class BadFile(CommandStreamError):
    kind = ErrorKind.BAD_FILE


class UnsupportedUri(CommandStreamError):
    kind = ErrorKind.UNSUPPORTED_URI


class StreamExhausted(CommandStreamError):
    kind = ErrorKind.STREAM_EXHAUSTED


class StreamCorrupt(CommandStreamError):
    kind = ErrorKind.STREAM_CORRUPT


class InternalError(CommandStreamError):
    kind = ErrorKind.INTERNAL


__all__ = [
    "ErrorKind",
    "CommandStreamError",
    "BadFile",
    "UnsupportedUri",
    "StreamExhausted",
    "StreamCorrupt",
    "InternalError",
]
