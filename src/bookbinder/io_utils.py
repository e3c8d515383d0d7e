"""I/O utilities for chapter sources and JSON artifacts.

JSON goes through orjson; chapter text is read with an encoding fallback
chain so stray CP1252 smart quotes in hand-edited chapters do not abort a
build.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from bookbinder.errors import SourceReadError


def read_source(path: Path) -> str:
    """Read a chapter file: UTF-8 -> CP1252 -> replace.

    Raises:
        SourceReadError: if the file cannot be opened or read at all.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SourceReadError(path, exc.strerror or str(exc)) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    try:
        return raw.decode("cp1252")
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace")


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts) + b"\n")
