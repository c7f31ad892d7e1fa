from __future__ import annotations

import codecs
import json
import logging
import os
import stat
from collections.abc import Callable
from typing import Any, BinaryIO

from cmdstream.errors import BadFile, InternalError, StreamCorrupt, StreamExhausted
from cmdstream.streams.base import ObjectStream, Record
from cmdstream.streams.codec import NonStandardConstant, corrupt_from, encode, strict_decoder

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65_536

# JSON insignificant whitespace
_WS = " \t\n\r"

_END = object()


def is_fifo(name: str) -> bool:
    try:
        st = os.stat(name)
    except OSError as e:
        raise BadFile(name, "failed to stat") from e
    return stat.S_ISFIFO(st.st_mode)


def _open_for_read(name: str) -> BinaryIO:
    return open(name, "rb")


class ConcatenatedStream(ObjectStream):
    """Interpret a byte stream as a JSON stream of concatenated values.

    https://en.wikipedia.org/wiki/JSON_streaming

    Each ``get()`` decodes exactly one value. At a clean end of data a
    loop-eligible stream (a FIFO, by default) is closed, reopened from the
    start and read again, at most ``max_reopens`` times per call, which is
    how a long-lived named pipe waits for its next writer.
    """

    def __init__(
        self,
        name: str,
        io: BinaryIO | None,
        *,
        loop: bool | None = None,
        max_reopens: int = 1,
        opener: Callable[[str], BinaryIO] | None = None,
    ) -> None:
        super().__init__(name, io)
        self.loop = is_fifo(name) if loop is None else loop
        self.max_reopens = max_reopens
        self.reopens = 0
        self._opener = opener or _open_for_read
        self._json = strict_decoder()
        self._utf8 = codecs.getincrementaldecoder("utf-8")()
        self._buf = ""

    def get(self) -> Record:
        attempts = 0
        while True:
            obj = self._decode_one()
            if obj is not _END:
                break
            if not self.loop or attempts >= self.max_reopens:
                if not self.loop:
                    self._at_eof = True
                logger.info("EOF: %s", self.name)
                raise StreamExhausted(self.name, "EOF")
            attempts += 1
            self._reopen()
        if not isinstance(obj, dict):
            raise StreamCorrupt(self.name, f"want: object, got: {json.dumps(obj)[:200]}")
        return obj

    def put(self, obj: Record) -> None:
        data = encode(self.name, obj)
        io = self.writer()
        try:
            io.write(data)
            io.flush()
        except OSError as e:
            raise InternalError(self.name, f"write failed: {e}") from e

    def _decode_one(self) -> Any:
        io = self.reader()
        while True:
            text = self._buf.lstrip(_WS)
            err: json.JSONDecodeError | None = None
            if text:
                try:
                    obj, end = self._json.raw_decode(text)
                except json.JSONDecodeError as e:
                    err = e  # value may continue in the next chunk
                except (NonStandardConstant, RecursionError) as e:
                    self._buf = ""
                    raise corrupt_from(self.name, e) from e
                else:
                    self._buf = text[end:]
                    return obj
            chunk = self._read_chunk(io)
            if chunk:
                self._buf = text + self._decode_bytes(chunk)
                continue
            self._decode_bytes(b"", final=True)
            self._buf = ""
            if err is None:
                return _END
            raise StreamCorrupt(self.name, str(err)) from err

    def _read_chunk(self, io: BinaryIO) -> bytes:
        read1 = getattr(io, "read1", None)
        try:
            return read1(CHUNK_SIZE) if read1 is not None else io.read(CHUNK_SIZE)
        except OSError as e:
            raise InternalError(self.name, f"stream bad: {e}") from e

    def _decode_bytes(self, data: bytes, final: bool = False) -> str:
        try:
            return self._utf8.decode(data, final)
        except UnicodeDecodeError as e:
            raise StreamCorrupt(self.name, f"invalid UTF-8: {e}") from e

    def _reopen(self) -> None:
        logger.info("reopen: %s", self.name)
        self.io.close()
        try:
            self.io = self._opener(self.name)
        except OSError as e:
            raise BadFile(self.name, f"failed to reopen: {e}") from e
        self._buf = ""
        self._utf8.reset()
        self.reopens += 1
