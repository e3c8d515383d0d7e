"""Records shared by both passes."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class HeadingRecord:
    """A numbered heading, created once in the numbering pass."""

    level: int          # 0 = chapter (##), 1 = section (###), ...
    number: str         # "2.1.3"
    title: str          # as authored, trimmed
    anchor: str         # unique within the run

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "number": self.number,
            "title": self.title,
            "anchor": self.anchor,
        }


@dataclass(slots=True)
class TableOfContents:
    """Headings in document order.

    Append-only while numbering; the token pass only reads it.
    """

    entries: list[HeadingRecord] = field(default_factory=list)
    _anchors: set[str] = field(default_factory=set)

    def append(self, record: HeadingRecord) -> None:
        self.entries.append(record)
        self._anchors.add(record.anchor)

    def has_anchor(self, anchor: str) -> bool:
        return anchor in self._anchors

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HeadingRecord]:
        return iter(self.entries)
