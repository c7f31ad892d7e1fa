from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from cmdstream.config import FacilityConfig

_FALSE_WORDS = {"0", "false", "no", "off"}


def _apply_env_overrides(cfg: FacilityConfig) -> FacilityConfig:
    import os

    name = os.environ.get("CMDSTREAM_NAME")
    if name:
        cfg.name = name
    uri = os.environ.get("CMDSTREAM_URI")
    if uri:
        cfg.uri = uri
    loop = os.environ.get("CMDSTREAM_LOOP_FIFO")
    if loop:
        cfg.loop_fifo = loop.strip().lower() not in _FALSE_WORDS
    reopens = os.environ.get("CMDSTREAM_MAX_REOPENS")
    if reopens:
        try:
            value = int(reopens)
        except ValueError as e:
            raise RuntimeError(f"Invalid CMDSTREAM_MAX_REOPENS: {reopens!r}") from e
        if value < 0:
            raise RuntimeError(f"Invalid CMDSTREAM_MAX_REOPENS: {reopens!r}")
        cfg.max_reopens = value
    return cfg


def load_config(path: str | None = None) -> FacilityConfig:
    """Load a facility config from JSON or YAML, then apply environment overrides.

    With no path, the defaults are used and only the environment applies.
    """
    if path is None:
        return _apply_env_overrides(FacilityConfig())

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RuntimeError(f"Cannot read configuration {path}: {e}") from e
    if p.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RuntimeError(
                "PyYAML is required to load YAML configs. Install with `uv add pyyaml`."
            ) from e
        try:
            data = yaml.safe_load(text)  # type: ignore[no-redef]
        except yaml.YAMLError as e:
            raise RuntimeError(f"Malformed configuration {path}: {e}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Malformed configuration {path}: {e}") from e

    # Accept a bare { "container": ..., "stream": ... } block under "fmt" too
    if isinstance(data, dict) and "fmt" in data and "formats" not in data:
        data = {k: v for k, v in data.items() if k != "fmt"} | {"formats": data["fmt"]}

    try:
        cfg = FacilityConfig.model_validate(data or {})
    except ValidationError as e:
        raise RuntimeError(f"Invalid configuration: {e}") from e
    return _apply_env_overrides(cfg)
