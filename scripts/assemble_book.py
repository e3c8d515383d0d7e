#!/usr/bin/env python3
"""Assemble Markdown chapter files into a single numbered book.

Chapters are read in the order given and numbered as one document:
headings get section numbers and anchors, ``[toc]`` expands to the table
of contents, ``[date]`` and ``[version]`` are substituted, and every
``(#anchor)`` link is checked. Problems that do not stop the build are
listed on stderr at the end.

Usage:
    python3 scripts/assemble_book.py chapters/*.md -o book.md

    # Pin the version and keep a JSON report of the run:
    python3 scripts/assemble_book.py chapters/*.md -o book.md \
        --project-version 3.2.0 --report build/assemble_report.json
"""
from __future__ import annotations

import argparse
import io
import logging
import sys
from pathlib import Path

from bookbinder.assembler import AssemblyResult, assemble
from bookbinder.config import load_config
from bookbinder.errors import AssemblyError
from bookbinder.report import book_commit, build_report, write_report

log = logging.getLogger("assemble_book")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Assemble Markdown chapters into one numbered book."
    )
    parser.add_argument(
        "sources",
        nargs="+",
        type=Path,
        help="Chapter files, in book order.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: stdout).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON config file overriding assembler defaults.",
    )
    parser.add_argument(
        "--version-file",
        default=None,
        help="Name of the version file at the repository root (default: VERSION).",
    )
    parser.add_argument(
        "--project-version",
        default=None,
        help="Use this version for [version] instead of looking it up.",
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not prefix the output with the generated-file warning.",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a JSON assembly report to this path.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def print_issues(result: AssemblyResult) -> None:
    if not result.issues:
        print(
            f"Assembled {result.heading_count} headings with no issues.",
            file=sys.stderr,
        )
        return
    print(f"\n{len(result.issues)} issue(s) found:\n", file=sys.stderr)
    print(result.issues.render(), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config).with_overrides(
            version_file=args.version_file,
            banner=() if args.no_banner else None,
        )
        version_lookup = None
        if args.project_version is not None:
            pinned: str = args.project_version
            version_lookup = lambda: pinned  # noqa: E731

        if args.output is None:
            result = assemble(
                args.sources, sys.stdout, config=config, version_lookup=version_lookup,
            )
        else:
            # Existing output is only replaced once assembly has succeeded.
            buffer = io.StringIO()
            result = assemble(
                args.sources, buffer, config=config, version_lookup=version_lookup,
            )
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(buffer.getvalue(), encoding="utf-8")
            log.info("Wrote %s", args.output)
    except AssemblyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print_issues(result)

    if args.report is not None:
        report = build_report(
            sources=args.sources,
            output=args.output,
            result=result,
            git_commit=book_commit(args.sources),
        )
        write_report(args.report, report)
        log.info("Report written to %s", args.report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
