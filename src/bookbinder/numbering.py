"""Numbering pass: number headings and inject anchors across all chapters.

The chapters are treated as one continuous document. Counters, the
code-block flag and the blank-line flag all carry over from one file to
the next, so a chapter file may end inside a fenced block and the next
file continues it.

Heading levels (one '#' is the book title and is never numbered):

    ## Chapter        level 0   -> "## 3 Chapter <a ...></a>"
    ### Section       level 1   -> "### 3.1 Section <a ...></a>"
    #### Subsection   level 2   -> "#### 3.1.1 Subsection <a ...></a>"
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from bookbinder.anchors import AnchorRegistry, generate_anchor
from bookbinder.config import AssemblerConfig
from bookbinder.io_utils import read_source
from bookbinder.issues import IssueLog
from bookbinder.records import HeadingRecord, TableOfContents

log = logging.getLogger(__name__)

FENCE = "```"

_HEADING_RE = re.compile(r"^(#+)\s+(\S.*)$")
_LINE_END_RE = re.compile(r"\r\n|\r|\n")


def is_fence(line: str) -> bool:
    return line.startswith(FENCE)


def split_lines(text: str) -> list[str]:
    """Split on CR, LF and CRLF only; a form feed stays inside its line."""
    lines = _LINE_END_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


@dataclass(slots=True)
class NumberingState:
    """Scan state threaded through every source of one run."""

    counters: list[int] = field(default_factory=list)
    in_code_block: bool = False
    last_blank: bool = True
    first_chapter: bool = True
    contents_pending: bool = True

    def advance(self, level: int) -> tuple[int, ...]:
        """Count a heading at ``level`` and return its number path."""
        while len(self.counters) <= level:
            self.counters.append(0)
        self.counters[level] += 1
        del self.counters[level + 1:]
        return tuple(self.counters)

    def emit(self, out: TextIO, line: str) -> None:
        out.write(line + "\n")
        self.last_blank = not line.strip()

    def ensure_blank(self, out: TextIO) -> None:
        if not self.last_blank:
            self.emit(out, "")


def format_number(segments: Sequence[int]) -> str:
    return ".".join(str(s) for s in segments)


def heading_line(hashes: str, number: str, title: str, anchor: str) -> str:
    return f'{hashes} {number} {title} <a name="{anchor}" id="{anchor}"></a>'


def number_lines(
    lines: Iterable[str],
    out: TextIO,
    *,
    state: NumberingState,
    toc: TableOfContents,
    registry: AnchorRegistry,
    issues: IssueLog,
    config: AssemblerConfig | None = None,
) -> None:
    """Copy ``lines`` to ``out``, rewriting numbered headings in place."""
    cfg = config or AssemblerConfig()
    for line in lines:
        if is_fence(line):
            state.in_code_block = not state.in_code_block
            state.emit(out, line)
            continue
        if state.in_code_block:
            state.emit(out, line)
            continue

        m = _HEADING_RE.match(line)
        if m is None or len(m.group(1)) == 1:
            state.emit(out, line)
            continue

        hashes = m.group(1)
        title = m.group(2).rstrip()
        level = len(hashes) - 2

        if level == 0 and state.contents_pending:
            state.contents_pending = False
            if cfg.is_contents_title(title):
                state.emit(out, line)
                continue

        if level == 0:
            if not state.first_chapter:
                state.ensure_blank(out)
                state.emit(out, cfg.separator)
                state.emit(out, "")
            state.first_chapter = False

        state.ensure_blank(out)
        segments = state.advance(level)
        number = format_number(segments)
        anchor = generate_anchor(title, segments, registry, issues)
        state.emit(out, heading_line(hashes, number, title, anchor))
        toc.append(
            HeadingRecord(level=level, number=number, title=title, anchor=anchor)
        )


def run_numbering_pass(
    sources: Sequence[Path],
    out: TextIO,
    *,
    state: NumberingState,
    toc: TableOfContents,
    registry: AnchorRegistry,
    issues: IssueLog,
    config: AssemblerConfig | None = None,
) -> None:
    """Number every source, in order, into ``out``.

    Raises:
        SourceReadError: if any source cannot be read.
        DuplicateAnchorError: on an anchor collision that numbering cannot fix.
    """
    for path in sources:
        log.info("Numbering %s", path)
        text = read_source(path)
        number_lines(
            split_lines(text),
            out,
            state=state,
            toc=toc,
            registry=registry,
            issues=issues,
            config=config,
        )
