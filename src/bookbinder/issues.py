"""Advisory issue collection.

Issues are accumulated during both passes and reported once, after the
run completes. They never change the outcome of a run.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum


class IssueKind(StrEnum):
    ANCHOR_RENAMED = "anchor_renamed"
    DANGLING_REFERENCE = "dangling_reference"
    MISSING_TOC = "missing_toc"
    VERSION_NOT_FOUND = "version_not_found"


@dataclass(frozen=True, slots=True)
class Issue:
    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, str]:
        return {"kind": str(self.kind), "message": self.message}


@dataclass(slots=True)
class IssueLog:
    """Append-only, ordered log of issues for one run."""

    _issues: list[Issue] = field(default_factory=list)

    def add(self, kind: IssueKind, message: str) -> Issue:
        issue = Issue(kind=kind, message=message)
        self._issues.append(issue)
        return issue

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self._issues)

    def __bool__(self) -> bool:
        return bool(self._issues)

    def of_kind(self, kind: IssueKind) -> list[Issue]:
        return [i for i in self._issues if i.kind == kind]

    def counts(self) -> dict[str, int]:
        """Per-kind counts, sorted by kind name for stable output."""
        counter = Counter(str(i.kind) for i in self._issues)
        return dict(sorted(counter.items()))

    def render(self) -> str:
        """One paragraph per issue, separated by blank lines."""
        return "\n\n".join(i.message for i in self._issues)
