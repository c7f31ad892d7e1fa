"""Location strings for command sources.

Accepted forms::

    relative.json
    /absolute/path/file.jstream
    file:relative.json
    file:///absolute/path/file.jstream
    file:///dev/stdin?fmt=json
    not-truly-json.json?fmt=jstream

A ``fmt`` query parameter overrides the format implied by the file extension.
Any number of slashes after ``file:`` denotes an absolute path.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from urllib.parse import parse_qsl, urlsplit

from cmdstream.config import FormatConfig
from cmdstream.errors import UnsupportedUri

logger = logging.getLogger(__name__)

FILE_SCHEME = "file"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


class Framing(str, enum.Enum):
    CONTAINER = "container"
    STREAM = "stream"


@dataclass(frozen=True)
class SourceDescriptor:
    uri: str
    scheme: str
    path: str
    format: str
    framing: Framing
    params: dict[str, str] = field(default_factory=dict)
    loop_eligible: bool = False


def normalize_uri(uri: str) -> str:
    """Give a bare path an explicit ``file`` scheme."""
    if _SCHEME_RE.match(uri):
        return uri
    if uri.startswith("/"):
        return "file://" + uri
    return "file:" + uri


def _resolve_path(netloc: str, path: str) -> str:
    # urlsplit puts "two.json" of "file://two.json" in the netloc
    if netloc:
        path = "/" + netloc + path
    if path.startswith("/"):
        path = "/" + path.lstrip("/")
    return path


def resolve_format(path: str, params: dict[str, str]) -> str:
    """Return the format token: ``fmt`` query parameter first, then the extension."""
    fmt = params.get("fmt")
    if fmt is None:
        fmt = PurePosixPath(path).suffix[1:]
    return fmt


def parse_uri(uri: str, formats: FormatConfig | None = None) -> SourceDescriptor:
    """Parse a location string into a SourceDescriptor without touching the file system."""
    formats = formats or FormatConfig()
    full = normalize_uri(uri)
    logger.info("uri: %s", full)

    parts = urlsplit(full)
    scheme = parts.scheme.lower()
    path = _resolve_path(parts.netloc, parts.path)
    logger.info("url: scheme:%s path:%s", scheme, path)

    if scheme not in ("", FILE_SCHEME):
        logger.info("unknown scheme for URL: %s", full)
        raise UnsupportedUri(full, f"unsupported scheme {scheme!r}")
    if not path:
        logger.info("no path found for URL: %s", full)
        raise UnsupportedUri(full, "empty path")

    # later duplicates win, so "?fmt=a&fmt=b" means b
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    fmt = resolve_format(path, params)
    if not fmt:
        logger.info("no format found for URL: %s", full)
        raise UnsupportedUri(full, "no format")
    if fmt == formats.container:
        framing = Framing.CONTAINER
    elif fmt == formats.stream:
        framing = Framing.STREAM
    else:
        logger.info("unknown format: %s from: %s", fmt, full)
        raise UnsupportedUri(full, f"unknown format {fmt!r}")

    return SourceDescriptor(
        uri=full,
        scheme=scheme or FILE_SCHEME,
        path=path,
        format=fmt,
        framing=framing,
        params=params,
    )


__all__ = [
    "FILE_SCHEME",
    "Framing",
    "SourceDescriptor",
    "normalize_uri",
    "parse_uri",
    "resolve_format",
]
