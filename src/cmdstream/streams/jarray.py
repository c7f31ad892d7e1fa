from __future__ import annotations

import copy
import json
import logging
from collections import deque
from typing import BinaryIO

from cmdstream.errors import InternalError, StreamCorrupt, StreamExhausted
from cmdstream.streams.base import ObjectStream, Record
from cmdstream.streams.codec import DECODE_ERRORS, corrupt_from, encode, strict_decoder

logger = logging.getLogger(__name__)


class WrappedArrayStream(ObjectStream):
    """Interpret a byte stream as one JSON array of records.

    Reading slurps the whole input at construction; ``put()`` on a reading
    stream queues behind the slurped records. Writing buffers records
    until ``flush()``; each flush writes the buffered records as one array, so
    several flushes over one handle produce a stream of arrays. Closing a
    writing stream flushes whatever is left.
    """

    def __init__(self, name: str, io: BinaryIO | None, reading: bool = True) -> None:
        super().__init__(name, io)
        self.reading = reading
        self.arr: deque[Record] = deque()
        if reading:
            self._slurp()

    def _slurp(self) -> None:
        io = self.reader()
        try:
            data = io.read()
        except OSError as e:
            raise InternalError(self.name, f"stream bad: {e}") from e
        try:
            value = strict_decoder().decode(data.decode("utf-8"))
        except DECODE_ERRORS as e:
            raise corrupt_from(self.name, e) from e
        if not isinstance(value, list):
            raise StreamCorrupt(self.name, f"want: array, got: {type(value).__name__}")
        self.arr.extend(value)
        logger.debug("slurped %d records from %s", len(self.arr), self.name)

    def get(self) -> Record:
        if not self.arr:
            logger.info("EOF: %s", self.name)
            raise StreamExhausted(self.name, "array end")
        obj = self.arr.popleft()
        if not isinstance(obj, dict):
            raise StreamCorrupt(self.name, f"want: object, got: {json.dumps(obj)[:200]}")
        return obj

    def put(self, obj: Record) -> None:
        # Fail on unencodable records now, and keep a snapshot the caller cannot mutate
        encode(self.name, obj)
        self.arr.append(copy.deepcopy(obj))

    def flush(self) -> None:
        # Unread records of a reading stream are never written back
        if self.reading or not self.arr:
            return
        data = encode(self.name, list(self.arr))
        io = self.writer()
        try:
            io.write(data)
            io.flush()
        except OSError as e:
            raise InternalError(self.name, f"write failed: {e}") from e
        self.arr.clear()
