from cmdstream.errors import (
    BadFile,
    CommandStreamError,
    ErrorKind,
    InternalError,
    StreamCorrupt,
    StreamExhausted,
    UnsupportedUri,
)
from cmdstream.facility import CommandDispatcher, FileCommandFacility, make
from cmdstream.selector import open_stream, resolve_source
from cmdstream.streams import ConcatenatedStream, ObjectStream, Record, WrappedArrayStream
from cmdstream.uri import Framing, SourceDescriptor, parse_uri

__all__ = [
    "BadFile",
    "CommandDispatcher",
    "CommandStreamError",
    "ConcatenatedStream",
    "ErrorKind",
    "FileCommandFacility",
    "Framing",
    "InternalError",
    "ObjectStream",
    "Record",
    "SourceDescriptor",
    "StreamCorrupt",
    "StreamExhausted",
    "UnsupportedUri",
    "WrappedArrayStream",
    "make",
    "open_stream",
    "parse_uri",
    "resolve_source",
]
