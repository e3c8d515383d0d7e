#!/usr/bin/env python3
"""Renumber chapter file prefixes in a directory to an even sequence.

Usage:
    python3 scripts/renumber_chapters.py chapters/ --dry-run
    python3 scripts/renumber_chapters.py chapters/ --start 10 --step 10 --width 3
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bookbinder.renumber import apply_renumber, plan_renumber

log = logging.getLogger("renumber_chapters")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rewrite numeric chapter prefixes (NN-name.md) in order."
    )
    parser.add_argument("directory", type=Path, help="Chapter directory.")
    parser.add_argument("--start", type=int, default=10, help="First prefix (default: 10).")
    parser.add_argument("--step", type=int, default=10, help="Prefix increment (default: 10).")
    parser.add_argument("--width", type=int, default=2, help="Zero-pad width (default: 2).")
    parser.add_argument("--suffix", default=".md", help="File suffix (default: .md).")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the renames without applying them.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if not args.directory.is_dir():
        raise SystemExit(f"not a directory: {args.directory}")
    try:
        plan = plan_renumber(
            args.directory,
            start=args.start,
            step=args.step,
            width=args.width,
            suffix=args.suffix,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    for r in plan:
        if r.changed:
            print(f"{r.source.name} -> {r.target.name}")
    if args.dry_run:
        log.info("Dry run: %d of %d files would be renamed",
                 sum(r.changed for r in plan), len(plan))
        return 0
    renamed = apply_renumber(plan)
    log.info("Renamed %d of %d files", renamed, len(plan))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
