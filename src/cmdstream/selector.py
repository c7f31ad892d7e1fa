from __future__ import annotations

import dataclasses
import logging
from typing import BinaryIO, Literal

from cmdstream.config import FacilityConfig
from cmdstream.errors import BadFile
from cmdstream.streams.base import ObjectStream
from cmdstream.streams.jarray import WrappedArrayStream
from cmdstream.streams.jstream import ConcatenatedStream, is_fifo
from cmdstream.uri import Framing, SourceDescriptor, parse_uri

logger = logging.getLogger(__name__)

Mode = Literal["r", "w"]

# file mode per (framing, stream mode)
_OPEN_MODES: dict[tuple[Framing, str], str] = {
    (Framing.CONTAINER, "r"): "rb",
    (Framing.CONTAINER, "w"): "wb",
    (Framing.STREAM, "r"): "rb",
    (Framing.STREAM, "w"): "ab",
}


def _check_mode(mode: str) -> None:
    if mode not in ("r", "w"):
        raise ValueError(f"mode must be 'r' or 'w', got {mode!r}")


def resolve_source(
    uri: str, mode: Mode = "r", config: FacilityConfig | None = None
) -> SourceDescriptor:
    """Parse a location string and settle whether its stream may loop on EOF."""
    _check_mode(mode)
    cfg = config or FacilityConfig()
    desc = parse_uri(uri, cfg.formats)
    if desc.framing is Framing.STREAM and mode == "r" and cfg.loop_fifo:
        desc = dataclasses.replace(desc, loop_eligible=is_fifo(desc.path))
    return desc


def _open_handle(desc: SourceDescriptor, mode: Mode) -> BinaryIO:
    try:
        return open(desc.path, _OPEN_MODES[(desc.framing, mode)])  # type: ignore[return-value]
    except OSError as e:
        logger.info("failed to open: %s: %s", desc.path, e)
        raise BadFile(desc.path, str(e)) from e


def open_descriptor(
    desc: SourceDescriptor, mode: Mode = "r", config: FacilityConfig | None = None
) -> ObjectStream:
    """Open the handle named by a descriptor and wrap it in its framing."""
    _check_mode(mode)
    cfg = config or FacilityConfig()
    logger.info("open: %s as %s", desc.uri, desc.format)
    io = _open_handle(desc, mode)
    try:
        if desc.framing is Framing.CONTAINER:
            return WrappedArrayStream(desc.path, io, reading=(mode == "r"))
        return ConcatenatedStream(
            desc.path, io, loop=desc.loop_eligible, max_reopens=cfg.max_reopens
        )
    except Exception:
        io.close()
        raise


def open_stream(uri: str, mode: Mode = "r", config: FacilityConfig | None = None) -> ObjectStream:
    """Resolve a location string to a framing and open it.

    URI problems raise ``UnsupportedUri`` before anything is opened; a missing
    or unreadable file raises ``BadFile`` here rather than on first use.
    """
    return open_descriptor(resolve_source(uri, mode, config), mode, config)


__all__ = [
    "Mode",
    "open_descriptor",
    "open_stream",
    "resolve_source",
]
