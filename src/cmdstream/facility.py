from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from cmdstream.config import FacilityConfig
from cmdstream.errors import StreamExhausted
from cmdstream.selector import Mode, open_descriptor, resolve_source
from cmdstream.streams.base import ObjectStream, Record

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandDispatcher(Protocol):
    def execute(self, command: Record) -> Any: ...


class FileCommandFacility:
    """
    Read commands from a file, FIFO or other local byte stream.

    The location may be like::

        file:relative.json
        file:///absolute/path/file.jstream
        file:///dev/stdin?fmt=json
        not-truly-json.json?fmt=jstream

    Each decoded command is handed to the dispatcher; a clean end of the
    stream ends ``run()``. Any other stream error propagates.
    """

    def __init__(
        self,
        uri: str,
        dispatcher: CommandDispatcher | None = None,
        *,
        config: FacilityConfig | None = None,
        mode: Mode = "r",
    ) -> None:
        self.uri = uri
        self.config = config or FacilityConfig()
        self._dispatcher = dispatcher
        self.descriptor = resolve_source(uri, mode, self.config)
        self._stream: ObjectStream | None = open_descriptor(self.descriptor, mode, self.config)

    @property
    def stream(self) -> ObjectStream:
        if self._stream is None:
            raise RuntimeError(f"facility for {self.uri} is closed")
        return self._stream

    def recv(self) -> Record:
        return self.stream.get()

    def send(self, command: Record) -> None:
        self.stream.put(command)

    def flush(self) -> None:
        self.stream.flush()

    def completion_callback(self, result: Any) -> None:
        logger.info("Command execution resulted with: %s", result)

    def run(self, stop: threading.Event | None = None) -> int:
        """Execute commands until the stream ends or ``stop`` is set; return the count.

        ``stop`` is only checked between commands, never while a read blocks.
        """
        if self._dispatcher is None:
            raise RuntimeError("no dispatcher to execute commands")
        count = 0
        try:
            while stop is None or not stop.is_set():
                try:
                    command = self.recv()
                except StreamExhausted:
                    logger.info("Command stream end")
                    break
                result = self._dispatcher.execute(command)
                count += 1
                logger.info("Command execution complete")
                self.completion_callback(result)
        finally:
            self.close()
        return count

    def close(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()

    @property
    def closed(self) -> bool:
        return self._stream is None

    def __enter__(self) -> FileCommandFacility:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
        self.close()
        return False


def make(
    uri: str, dispatcher: CommandDispatcher | None = None, **kwargs: Any
) -> FileCommandFacility:
    return FileCommandFacility(uri, dispatcher, **kwargs)


__all__ = [
    "CommandDispatcher",
    "FileCommandFacility",
    "make",
]
