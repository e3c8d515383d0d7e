"""Chapter file renumbering.

Chapter files carry a numeric ordering prefix (``03-setup.md``,
``10_appendix.md``). After inserting or removing chapters the prefixes get
ragged; this utility rewrites them to an even sequence while keeping the
current order:

    02-intro.md, 05-setup.md, 07-usage.md
        -> 10-intro.md, 20-setup.md, 30-usage.md   (start=10, step=10)
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

log = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^(\d+)([-_])(.+)$")


@dataclass(frozen=True, slots=True)
class Rename:
    source: Path
    target: Path

    @property
    def changed(self) -> bool:
        return self.source != self.target


@dataclass(frozen=True, slots=True)
class NumberedFile:
    prefix: int
    separator: str      # "-" or "_"
    stem: str           # name after the separator, suffix included
    path: Path


def numbered_files(directory: Path, suffix: str = ".md") -> list[NumberedFile]:
    """Files in ``directory`` with a numeric prefix, in prefix order."""
    found: list[NumberedFile] = []
    for path in directory.iterdir():
        if not path.is_file() or path.suffix != suffix:
            continue
        m = _PREFIX_RE.match(path.name)
        if m:
            found.append(NumberedFile(int(m.group(1)), m.group(2), m.group(3), path))
    found.sort(key=lambda f: (f.prefix, f.path.name))
    return found


def plan_renumber(
    directory: Path,
    *,
    start: int = 10,
    step: int = 10,
    width: int = 2,
    suffix: str = ".md",
) -> list[Rename]:
    """Compute renames without touching the filesystem."""
    if start < 0 or step < 1 or width < 1:
        raise ValueError("start must be >= 0, step and width must be >= 1")
    plan: list[Rename] = []
    for i, f in enumerate(numbered_files(directory, suffix)):
        new_name = f"{start + i * step:0{width}d}{f.separator}{f.stem}"
        plan.append(Rename(source=f.path, target=f.path.with_name(new_name)))
    return plan


def check_conflicts(plan: list[Rename]) -> None:
    """Raise FileExistsError if any target would overwrite a file outside the plan."""
    moving = {r.source for r in plan if r.changed}
    seen: set[Path] = set()
    for r in plan:
        if r.target in seen:
            raise FileExistsError(f"two files would be renamed to {r.target}")
        seen.add(r.target)
        if r.changed and r.target.exists() and r.target not in moving:
            raise FileExistsError(f"refusing to overwrite {r.target}")


def apply_renumber(plan: list[Rename]) -> int:
    """Apply a plan; returns the number of files renamed.

    Every target is checked before the first rename. Files then move
    through temporary names so that swapped prefixes (01 <-> 02) never
    overwrite each other.
    """
    check_conflicts(plan)
    pending = [r for r in plan if r.changed]
    tag = uuid4().hex[:8]
    staged: list[tuple[Path, Path]] = []
    for r in pending:
        tmp = r.source.with_name(f".renumber-{tag}-{r.source.name}")
        r.source.rename(tmp)
        staged.append((tmp, r.target))
    for tmp, target in staged:
        tmp.rename(target)
        log.info("Renamed %s", target.name)
    return len(pending)
