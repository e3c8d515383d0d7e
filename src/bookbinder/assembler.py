"""Two-pass book assembly.

    sources --numbering pass--> temp buffer --token pass--> out
                 |                                ^
                 +------ table of contents -------+

The numbering pass must see every chapter before any link can be checked
or the table of contents expanded, so the numbered text is spooled to a
temporary file between the passes. The temporary file is removed on every
exit path, including fatal errors.
"""
from __future__ import annotations

import logging
import tempfile
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import TextIO

from bookbinder.anchors import AnchorRegistry
from bookbinder.config import AssemblerConfig
from bookbinder.issues import IssueLog
from bookbinder.numbering import NumberingState, run_numbering_pass
from bookbinder.records import TableOfContents
from bookbinder.tokens import run_token_pass
from bookbinder.version import lookup_version

log = logging.getLogger(__name__)

VersionLookup = Callable[[], str | None]


@dataclass(slots=True)
class AssemblyResult:
    toc: TableOfContents
    issues: IssueLog
    toc_seen: bool
    version: str | None
    timings_sec: dict[str, float] = field(default_factory=dict)

    @property
    def heading_count(self) -> int:
        return len(self.toc)


def default_version_lookup(config: AssemblerConfig) -> VersionLookup:
    """Look the version up from the current working directory."""
    return lambda: lookup_version(
        Path.cwd(), version_file=config.version_file, marker=config.vcs_marker,
    )


def write_banner(out: TextIO, config: AssemblerConfig) -> None:
    if not config.banner:
        return
    for line in config.banner:
        out.write(line + "\n")
    out.write("\n")


def assemble(
    sources: Sequence[Path],
    out: TextIO,
    *,
    config: AssemblerConfig | None = None,
    version_lookup: VersionLookup | None = None,
    today: date | None = None,
) -> AssemblyResult:
    """Assemble ``sources`` (in order) into one numbered document on ``out``.

    Raises:
        SourceReadError: if a source cannot be read.
        DuplicateAnchorError: on an unresolvable anchor collision.
    """
    cfg = config or AssemblerConfig()
    lookup = version_lookup or default_version_lookup(cfg)
    issues = IssueLog()
    toc = TableOfContents()
    registry = AnchorRegistry()
    timings: dict[str, float] = {}

    with tempfile.TemporaryFile("w+", encoding="utf-8") as buffer:
        t0 = time.perf_counter()
        run_numbering_pass(
            sources,
            buffer,
            state=NumberingState(),
            toc=toc,
            registry=registry,
            issues=issues,
            config=cfg,
        )
        timings["numbering"] = round(time.perf_counter() - t0, 4)

        buffer.flush()
        buffer.seek(0)
        log.info("Substituting tokens and checking links (%d headings)", len(toc))

        t1 = time.perf_counter()
        version = lookup()
        write_banner(out, cfg)
        state = run_token_pass(
            buffer,
            out,
            toc=toc,
            issues=issues,
            version=version,
            today=today,
            config=cfg,
        )
        timings["tokens"] = round(time.perf_counter() - t1, 4)

    return AssemblyResult(
        toc=toc,
        issues=issues,
        toc_seen=state.toc_seen,
        version=version,
        timings_sec=timings,
    )
