"""orjson-backed JSON helpers for settings files and CLI output."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def loads_json(data: bytes | str) -> Any:
    """Parse JSON from bytes or text."""
    return orjson.loads(data)


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return loads_json(path.read_bytes())


def dumps_json(obj: Any, *, pretty: bool = False) -> bytes:
    """Serialize to JSON bytes, preserving dict insertion order."""
    return orjson.dumps(obj, option=orjson.OPT_INDENT_2 if pretty else None)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_json(obj, pretty=pretty) + b"\n")
