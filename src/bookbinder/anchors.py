"""Anchor generation for numbered headings.

Anchors are derived from the heading title alone:

    "Getting Started!"  ->  "getting-started-"

When two headings normalize to the same anchor, the later one is prefixed
with the leading components of its number path, as few as needed:

    ## Intro   (1)   -> intro
    ## Intro   (2)   -> 2-intro
    ### Setup  (1.1) -> setup
    ### Setup  (2.1) -> 2-setup
    ### Setup  (2.2) -> 2-2-setup

An anchor therefore only stays stable while its title and the numbering of
its colliding siblings stay unchanged. Renames are reported as issues so
authors know which links are numbering-dependent.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from bookbinder.errors import DuplicateAnchorError
from bookbinder.issues import IssueKind, IssueLog

log = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9-]")


def normalize_anchor(title: str) -> str:
    """Replace every character outside [A-Za-z0-9-] with '-' and lower-case."""
    return _UNSAFE_RE.sub("-", title).lower()


@dataclass(slots=True)
class AnchorRegistry:
    """Set of anchors assigned so far in the run. Never shrinks."""

    _taken: set[str] = field(default_factory=set)

    def __contains__(self, anchor: object) -> bool:
        return anchor in self._taken

    def __len__(self) -> int:
        return len(self._taken)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._taken))

    def register(self, anchor: str) -> None:
        self._taken.add(anchor)


def generate_anchor(
    title: str,
    segments: Sequence[int],
    registry: AnchorRegistry,
    issues: IssueLog,
) -> str:
    """Return a run-unique anchor for ``title`` and register it.

    Args:
        title: Heading title as authored.
        segments: Full number path of the heading, most significant first.
        registry: Anchors already handed out in this run.
        issues: Receives a warning whenever the anchor had to be renamed.

    Raises:
        DuplicateAnchorError: if every prefix of ``segments`` still collides.
    """
    base = normalize_anchor(title)
    anchor = base
    used = 0
    while anchor in registry:
        if used == len(segments):
            raise DuplicateAnchorError(base, tuple(segments))
        used += 1
        prefix = "-".join(str(s) for s in segments[:used])
        anchor = f"{prefix}-{base}"

    if anchor != base:
        log.debug("anchor %s renamed to %s", base, anchor)
        issues.add(
            IssueKind.ANCHOR_RENAMED,
            f"Duplicate anchor '{base}' renamed to '{anchor}'. This anchor "
            "depends on section numbering and may change if chapters or "
            "sections are added, removed or reordered.",
        )
    registry.register(anchor)
    return anchor
