"""Fatal error types for book assembly.

Anything raised from here aborts the run. Advisory problems are recorded as
issues instead (see ``bookbinder.issues``).
"""
from __future__ import annotations

from pathlib import Path


class AssemblyError(RuntimeError):
    """Base class for unrecoverable assembly failures."""


class SourceReadError(AssemblyError):
    """Raised when an input chapter cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class DuplicateAnchorError(AssemblyError):
    """Raised when a title collision survives every number-path prefix."""

    def __init__(self, anchor: str, segments: tuple[int, ...]) -> None:
        number = ".".join(str(s) for s in segments)
        super().__init__(
            f"duplicate anchor '{anchor}' at {number or '<no number>'} "
            "cannot be disambiguated; rename one of the headings"
        )
        self.anchor = anchor
        self.segments = segments


class ConfigError(AssemblyError):
    """Raised for a malformed assembler configuration file."""
