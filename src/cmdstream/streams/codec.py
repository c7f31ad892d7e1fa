from __future__ import annotations

import json
from typing import Any

from cmdstream.errors import StreamCorrupt


class NonStandardConstant(ValueError):
    """NaN, Infinity and -Infinity are not JSON."""


def _reject_constant(token: str) -> Any:
    raise NonStandardConstant(f"not a JSON value: {token}")


# Errors a strict decode may raise on bad content
DECODE_ERRORS = (json.JSONDecodeError, NonStandardConstant, UnicodeDecodeError, RecursionError)


def strict_decoder() -> json.JSONDecoder:
    return json.JSONDecoder(parse_constant=_reject_constant)


def corrupt_from(name: str, e: Exception) -> StreamCorrupt:
    if isinstance(e, RecursionError):
        return StreamCorrupt(name, "nesting too deep")
    return StreamCorrupt(name, str(e))


def encode(name: str, obj: Any) -> bytes:
    """Encode compact UTF-8 JSON, refusing anything a strict reader would reject."""
    try:
        text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise corrupt_from(name, e) from e
    return text.encode("utf-8")
