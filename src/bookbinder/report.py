"""Assembly report: a JSON record of one build for CI and later comparison.

    {
      "run_id": "assemble_20240517T101500Z_1a2b3c4d",
      "created_at": "2024-05-17T10:15:00+00:00",
      "git_commit": "1a2b3c4",
      "toc": [...], "issues": [...], "issue_counts": {...}
    }
"""
from __future__ import annotations

import subprocess
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from bookbinder.assembler import AssemblyResult
from bookbinder.io_utils import load_json, save_json
from bookbinder.version import find_repo_root

REPORT_VERSION = "1.0"


def run_id_for(started: datetime, prefix: str = "assemble") -> str:
    """Run id sharing its timestamp with the report's ``created_at``."""
    return f"{prefix}_{started:%Y%m%dT%H%M%SZ}_{uuid4().hex[:8]}"


def book_commit(sources: Sequence[Path]) -> str | None:
    """Short commit of the repository holding the first chapter, if any."""
    root = find_repo_root(sources[0]) if sources else find_repo_root()
    if root is None:
        return None
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=str(root),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.strip() or None


def build_report(
    *,
    sources: Sequence[Path],
    output: Path | None,
    result: AssemblyResult,
    run_id: str | None = None,
    git_commit: str | None = None,
) -> dict[str, Any]:
    """Build the report payload for one assembly run."""
    started = datetime.now(UTC)
    return {
        "report_version": REPORT_VERSION,
        "created_at": started.isoformat(),
        "run_id": run_id or run_id_for(started),
        "git_commit": git_commit,
        "sources": [str(p) for p in sources],
        "output": str(output) if output is not None else None,
        "version": result.version,
        "toc_seen": result.toc_seen,
        "toc": [r.to_dict() for r in result.toc],
        "issues": [i.to_dict() for i in result.issues],
        "issue_counts": result.issues.counts(),
        "timings_sec": result.timings_sec,
    }


def write_report(path: Path, report: dict[str, Any]) -> Path:
    save_json(report, path, pretty=True)
    return path


def load_report(path: Path) -> dict[str, Any]:
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid report payload in {path}")
    return data
