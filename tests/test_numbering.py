"""Tests for bookbinder.numbering."""
from __future__ import annotations

import io
from pathlib import Path

import pytest

from bookbinder.anchors import AnchorRegistry
from bookbinder.errors import DuplicateAnchorError, SourceReadError
from bookbinder.issues import IssueKind, IssueLog
from bookbinder.numbering import (
    NumberingState,
    format_number,
    heading_line,
    number_lines,
    run_numbering_pass,
    split_lines,
)
from bookbinder.records import TableOfContents


def _number(*files: list[str]) -> tuple[str, TableOfContents, IssueLog]:
    """Number several in-memory chapter files as one run."""
    out = io.StringIO()
    state = NumberingState()
    toc = TableOfContents()
    registry = AnchorRegistry()
    issues = IssueLog()
    for lines in files:
        number_lines(
            lines, out, state=state, toc=toc, registry=registry, issues=issues,
        )
    return out.getvalue(), toc, issues


def _numbers(toc: TableOfContents) -> list[str]:
    return [r.number for r in toc]


class TestNumberingState:
    def test_advance_resets_deeper_levels(self) -> None:
        state = NumberingState()
        assert state.advance(0) == (1,)
        assert state.advance(1) == (1, 1)
        assert state.advance(1) == (1, 2)
        assert state.advance(2) == (1, 2, 1)
        assert state.advance(0) == (2,)
        assert state.advance(1) == (2, 1)

    def test_skipped_level_renders_zero(self) -> None:
        state = NumberingState()
        state.advance(0)
        assert state.advance(2) == (1, 0, 1)

    def test_format_number(self) -> None:
        assert format_number((2, 1, 3)) == "2.1.3"

    def test_heading_line(self) -> None:
        assert heading_line("###", "1.1", "Setup", "setup") == (
            '### 1.1 Setup <a name="setup" id="setup"></a>'
        )


class TestTwoChapterExample:
    FILE_A = ["# My Book", "", "## Intro", "Text", "### Setup", "body"]
    FILE_B = ["## Intro", "more"]

    def test_output(self) -> None:
        text, _, _ = _number(self.FILE_A, self.FILE_B)
        assert text == (
            "# My Book\n"
            "\n"
            '## 1 Intro <a name="intro" id="intro"></a>\n'
            "Text\n"
            "\n"
            '### 1.1 Setup <a name="setup" id="setup"></a>\n'
            "body\n"
            "\n"
            "---\n"
            "\n"
            '## 2 Intro <a name="2-intro" id="2-intro"></a>\n'
            "more\n"
        )

    def test_toc(self) -> None:
        _, toc, _ = _number(self.FILE_A, self.FILE_B)
        assert [(r.level, r.number, r.title, r.anchor) for r in toc] == [
            (0, "1", "Intro", "intro"),
            (1, "1.1", "Setup", "setup"),
            (0, "2", "Intro", "2-intro"),
        ]

    def test_rename_issue(self) -> None:
        _, _, issues = _number(self.FILE_A, self.FILE_B)
        assert len(issues) == 1
        assert issues.of_kind(IssueKind.ANCHOR_RENAMED)


class TestHeadings:
    def test_counters_reset_on_new_chapter(self) -> None:
        _, toc, _ = _number(["## A", "### A1", "### A2", "## B", "### B1"])
        assert _numbers(toc) == ["1", "1.1", "1.2", "2", "2.1"]
        assert [r.anchor for r in toc] == ["a", "a1", "a2", "b", "b1"]

    def test_number_path_length_matches_depth(self) -> None:
        _, toc, _ = _number(["## A", "### B", "#### C", "##### D", "### E"])
        for record in toc:
            assert len(record.number.split(".")) == record.level + 1

    def test_numbering_continues_across_files(self) -> None:
        _, toc, _ = _number(["## One", "### Part"], ["### More"], ["## Two"])
        assert _numbers(toc) == ["1", "1.1", "1.2", "2"]

    def test_book_title_not_numbered(self) -> None:
        text, toc, _ = _number(["# The Book", "## Intro"])
        assert text.startswith("# The Book\n")
        assert len(toc) == 1

    def test_title_trailing_whitespace_stripped(self) -> None:
        text, toc, _ = _number(["## Intro   "])
        assert toc.entries[0].title == "Intro"
        assert '## 1 Intro <a name="intro"' in text

    def test_hashes_without_space_are_text(self) -> None:
        text, toc, _ = _number(["##NotAHeading"])
        assert text == "##NotAHeading\n"
        assert len(toc) == 0

    def test_blank_line_not_doubled(self) -> None:
        text, _, _ = _number(["## A", "text", "", "### B"])
        assert "text\n\n### 1.1 B" in text
        assert "\n\n\n" not in text

    def test_no_blank_line_at_start(self) -> None:
        text, _, _ = _number(["## A"])
        assert text.startswith("## 1 A")

    def test_separator_only_between_chapters(self) -> None:
        text, _, _ = _number(["## A", "### A1"], ["## B"], ["## C"])
        assert text.count("---\n") == 2
        assert text.index("---") > text.index("## 1 A")

    def test_separator_preceded_by_blank_line(self) -> None:
        text, _, _ = _number(["## A", "last line"], ["## B"])
        assert "last line\n\n---\n\n## 2 B" in text


class TestContentsHeading:
    def test_first_contents_heading_verbatim(self) -> None:
        text, toc, _ = _number(["## Contents", "[toc]", "## Intro"])
        assert text == (
            "## Contents\n"
            "[toc]\n"
            "\n"
            '## 1 Intro <a name="intro" id="intro"></a>\n'
        )
        assert _numbers(toc) == ["1"]

    def test_table_of_contents_case_insensitive(self) -> None:
        text, toc, _ = _number(["## TABLE OF CONTENTS", "## Intro"])
        assert "## TABLE OF CONTENTS\n" in text
        assert "---" not in text
        assert len(toc) == 1

    def test_only_first_chapter_heading_qualifies(self) -> None:
        _, toc, _ = _number(["## Intro", "## Contents"])
        assert [(r.number, r.anchor) for r in toc] == [("1", "intro"), ("2", "contents")]

    def test_special_case_does_not_recur(self) -> None:
        _, toc, _ = _number(["## Contents"], ["## Contents"])
        assert [(r.number, r.title) for r in toc] == [("1", "Contents")]


class TestCodeBlocks:
    def test_headings_in_code_are_copied(self) -> None:
        text, toc, _ = _number(["```", "## Not a heading", "```", "## Real"])
        assert "## Not a heading\n" in text
        assert [r.title for r in toc] == ["Real"]

    def test_code_block_spans_files(self) -> None:
        _, toc, _ = _number(
            ["## Start", "```python", "## inside"],
            ["## still inside", "```", "## Out"],
        )
        assert [r.title for r in toc] == ["Start", "Out"]


class TestRunNumberingPass:
    def test_reads_files_in_order(self, tmp_path: Path) -> None:
        a = tmp_path / "a.md"
        b = tmp_path / "b.md"
        a.write_text("## Intro\n### Setup\n", encoding="utf-8")
        b.write_text("## Intro\n", encoding="utf-8")
        out = io.StringIO()
        toc = TableOfContents()
        issues = IssueLog()
        run_numbering_pass(
            [a, b],
            out,
            state=NumberingState(),
            toc=toc,
            registry=AnchorRegistry(),
            issues=issues,
        )
        assert [r.anchor for r in toc] == ["intro", "setup", "2-intro"]
        assert len(issues) == 1

    def test_cp1252_source(self, tmp_path: Path) -> None:
        src = tmp_path / "quotes.md"
        src.write_bytes("## “Quoted”\n".encode("cp1252"))
        toc = TableOfContents()
        run_numbering_pass(
            [src],
            io.StringIO(),
            state=NumberingState(),
            toc=toc,
            registry=AnchorRegistry(),
            issues=IssueLog(),
        )
        assert toc.entries[0].title == "“Quoted”"

    def test_missing_source_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(SourceReadError) as excinfo:
            run_numbering_pass(
                [tmp_path / "missing.md"],
                io.StringIO(),
                state=NumberingState(),
                toc=TableOfContents(),
                registry=AnchorRegistry(),
                issues=IssueLog(),
            )
        assert excinfo.value.path == tmp_path / "missing.md"

    def test_unresolvable_duplicate_is_fatal(self) -> None:
        with pytest.raises(DuplicateAnchorError):
            _number(["### Intro", "### 1 Intro", "## Intro"])


class TestSplitLines:
    def test_only_line_endings_split(self) -> None:
        text = "Page\x0cbreak\r\nTab\x0bbed\rnext same\x85line\n"
        assert split_lines(text) == ["Page\x0cbreak", "Tab\x0bbed", "next same\x85line"]

    def test_trailing_newline_dropped_once(self) -> None:
        assert split_lines("a\n\n") == ["a", ""]
        assert split_lines("") == []

    def test_form_feed_copied_verbatim(self, tmp_path: Path) -> None:
        src = tmp_path / "ff.md"
        src.write_text("## Intro\n\nPage\x0cbreak\n", encoding="utf-8")
        out = io.StringIO()
        run_numbering_pass(
            [src],
            out,
            state=NumberingState(),
            toc=TableOfContents(),
            registry=AnchorRegistry(),
            issues=IssueLog(),
        )
        assert out.getvalue().endswith("\nPage\x0cbreak\n")
