"""Project version lookup for the ``[version]`` token."""
from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path


def repo_roots(start: Path | None = None, *, marker: str = ".git") -> Iterator[Path]:
    """Yield ancestors of ``start`` (nearest first) holding a ``marker`` directory."""
    here = (start or Path.cwd()).resolve()
    if here.is_file():
        here = here.parent
    for candidate in (here, *here.parents):
        if (candidate / marker).is_dir():
            yield candidate


def find_repo_root(start: Path | None = None, *, marker: str = ".git") -> Path | None:
    """Return the nearest repository root above ``start``, if any."""
    return next(repo_roots(start, marker=marker), None)


def lookup_version(
    start: Path | None = None,
    *,
    version_file: str = "VERSION",
    marker: str = ".git",
) -> str | None:
    """First line of the nearest repository root's version file.

    Roots without a version file are skipped, so a nested checkout falls
    through to its enclosing repository. Returns None when nothing is found
    or the first line is empty.
    """
    for root in repo_roots(start, marker=marker):
        path = root / version_file
        if not path.is_file():
            continue
        with path.open(encoding="utf-8", errors="replace") as f:
            first = f.readline().strip()
        return first or None
    return None
