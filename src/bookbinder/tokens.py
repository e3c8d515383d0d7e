"""Token and link pass over the numbered buffer.

Recognized tokens (case-insensitive, ignored inside fenced code):

    [toc]       alone on a line; replaced by the full table of contents
    [date]      inline; today's date, DD/MM/YYYY by default
    [version]   inline; the project version, left untouched if unknown

Every ``(#anchor)`` reference outside code is checked against the table of
contents built by the numbering pass.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import TextIO

from bookbinder.config import AssemblerConfig
from bookbinder.issues import IssueKind, IssueLog
from bookbinder.numbering import is_fence
from bookbinder.records import HeadingRecord, TableOfContents

log = logging.getLogger(__name__)

_TOC_RE = re.compile(r"^\s*\[toc\]\s*$", re.IGNORECASE)
_DATE_RE = re.compile(r"\[date\]", re.IGNORECASE)
_VERSION_RE = re.compile(r"\[version\]", re.IGNORECASE)
_REF_RE = re.compile(r"\(#([^)\s]+)\)")


def toc_entry(record: HeadingRecord, indent: str = "  ") -> str:
    link = f"[{record.number} {record.title}](#{record.anchor})"
    if record.level == 0:
        link = f"**{link}**"
    return f"{indent * record.level}- {link}"


def render_toc(toc: Iterable[HeadingRecord], indent: str = "  ") -> list[str]:
    """Render headings as a nested Markdown list, one line per heading."""
    return [toc_entry(r, indent) for r in toc]


@dataclass(slots=True)
class TokenState:
    in_code_block: bool = False
    toc_seen: bool = False
    version_missing: bool = False


def check_references(line: str, toc: TableOfContents, issues: IssueLog) -> None:
    for m in _REF_RE.finditer(line):
        ref = m.group(1)
        if not toc.has_anchor(ref):
            issues.add(
                IssueKind.DANGLING_REFERENCE,
                f"Reference to '#{ref}' does not match any heading anchor.",
            )


def substitute(line: str, today: str, version: str | None, state: TokenState) -> str:
    line = _DATE_RE.sub(lambda _m: today, line)
    if _VERSION_RE.search(line):
        if version is None:
            state.version_missing = True
        else:
            line = _VERSION_RE.sub(lambda _m: version, line)
    return line


def run_token_pass(
    lines: Iterable[str],
    out: TextIO,
    *,
    toc: TableOfContents,
    issues: IssueLog,
    version: str | None,
    today: date | None = None,
    config: AssemblerConfig | None = None,
) -> TokenState:
    """Substitute tokens, expand ``[toc]`` and validate internal links.

    ``lines`` may carry their trailing newlines (as when iterating a file).
    """
    cfg = config or AssemblerConfig()
    stamp = (today or date.today()).strftime(cfg.date_format)
    state = TokenState()

    for raw in lines:
        line = raw.rstrip("\n")
        if is_fence(line):
            state.in_code_block = not state.in_code_block
            out.write(line + "\n")
            continue
        if state.in_code_block:
            out.write(line + "\n")
            continue

        check_references(line, toc, issues)

        if _TOC_RE.match(line):
            state.toc_seen = True
            for entry in render_toc(toc, cfg.toc_indent):
                out.write(entry + "\n")
            continue

        out.write(substitute(line, stamp, version, state) + "\n")

    if not state.toc_seen:
        issues.add(
            IssueKind.MISSING_TOC,
            "No [toc] token found; the table of contents was not inserted.",
        )
    if state.version_missing:
        issues.add(
            IssueKind.VERSION_NOT_FOUND,
            "A [version] token was used but no version could be found "
            f"(looked for a '{cfg.version_file}' file at the repository root). "
            "The token was left unchanged.",
        )
    return state
