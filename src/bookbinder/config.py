"""Assembler configuration.

Defaults cover the usual book layout; a JSON file can override any field:

    {
      "version_file": "RELEASE",
      "separator": "***",
      "contents_titles": ["contents", "table of contents", "inhalt"]
    }
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import orjson

from bookbinder.errors import ConfigError
from bookbinder.io_utils import load_json

DEFAULT_BANNER: tuple[str, ...] = (
    "<!--",
    "  GENERATED FILE - DO NOT EDIT.",
    "  This document was assembled from separate chapter files.",
    "  Edit the chapter sources and rebuild instead.",
    "-->",
)


@dataclass(frozen=True, slots=True)
class AssemblerConfig:
    version_file: str = "VERSION"
    vcs_marker: str = ".git"
    separator: str = "---"
    toc_indent: str = "  "
    contents_titles: tuple[str, ...] = ("contents", "table of contents")
    date_format: str = "%d/%m/%Y"
    banner: tuple[str, ...] = DEFAULT_BANNER

    def is_contents_title(self, title: str) -> bool:
        return title.strip().lower() in {t.lower() for t in self.contents_titles}

    def with_overrides(self, **overrides: Any) -> AssemblerConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


_TUPLE_FIELDS = {"contents_titles", "banner"}


def config_from_dict(data: dict[str, Any]) -> AssemblerConfig:
    """Build a config from a decoded JSON object, validating keys and types."""
    known = {f.name for f in fields(AssemblerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in data.items():
        if key in _TUPLE_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"config key '{key}' must be a list of strings")
            values[key] = tuple(value)
        else:
            if not isinstance(value, str):
                raise ConfigError(f"config key '{key}' must be a string")
            values[key] = value
    return AssemblerConfig(**values)


def load_config(path: Path | None) -> AssemblerConfig:
    """Load config from a JSON file, or return defaults when ``path`` is None."""
    if path is None:
        return AssemblerConfig()
    try:
        data = load_json(path)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must contain a JSON object")
    return config_from_dict(data)
