from __future__ import annotations

import abc
import logging
from collections.abc import Iterator
from typing import Any, BinaryIO

from cmdstream.errors import BadFile, InternalError, StreamExhausted

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class ObjectStream(abc.ABC):
    """Abstract object-level stream over one exclusively owned binary handle.

    Subclasses implement the framing; handle health checks live here so the
    framings never repeat them. The stream closes its handle exactly once,
    flushing first.
    """

    def __init__(self, name: str, io: BinaryIO | None) -> None:
        if io is None or io.closed:
            raise BadFile(name, "handle is not open")
        self.name = name
        self.io = io
        self._at_eof = False
        self._closed = False

    # One could, but in this case, one should not.
    def __copy__(self) -> ObjectStream:
        raise TypeError(f"{type(self).__name__} owns its handle and cannot be copied")

    def __deepcopy__(self, memo: dict[int, Any]) -> ObjectStream:
        raise TypeError(f"{type(self).__name__} owns its handle and cannot be copied")

    @abc.abstractmethod
    def get(self) -> Record:
        """Return the next record from the stream."""

    @abc.abstractmethod
    def put(self, obj: Record) -> None:
        """Put a record to the stream."""

    def flush(self) -> None:
        """Buffering streams may flush explicitly prior to close."""

    def reader(self) -> BinaryIO:
        """Return the handle, checked okay for reading."""
        if self._at_eof:
            logger.info("EOF: %s", self.name)
            raise StreamExhausted(self.name, "EOF")
        if self.io.closed:
            raise InternalError(self.name, "stream bad: handle closed")
        return self.io

    def writer(self) -> BinaryIO:
        """Return the handle, checked okay for writing."""
        if self.io.closed:
            raise InternalError(self.name, "stream bad: handle closed")
        return self.io

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        finally:
            self.io.close()

    def __enter__(self) -> ObjectStream:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        self.close()
        return False

    def __iter__(self) -> Iterator[Record]:
        while True:
            try:
                yield self.get()
            except StreamExhausted:
                return
