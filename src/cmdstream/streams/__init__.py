from cmdstream.streams.base import ObjectStream, Record
from cmdstream.streams.jarray import WrappedArrayStream
from cmdstream.streams.jstream import ConcatenatedStream, is_fifo

__all__ = [
    "ConcatenatedStream",
    "ObjectStream",
    "Record",
    "WrappedArrayStream",
    "is_fifo",
]
