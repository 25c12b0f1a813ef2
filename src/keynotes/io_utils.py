"""JSON and text I/O helpers built on orjson."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))


def dump_json(obj: Any) -> None:
    """Write indented JSON to stdout, preserving key order."""
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def read_text(path: Path | None) -> str:
    """Read a UTF-8 text file, or stdin when ``path`` is None."""
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")
