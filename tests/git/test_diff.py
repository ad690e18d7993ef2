"""Tests for unified diff coordinate mapping."""

from __future__ import annotations

from jacquez.git.diff import DiffPatch, parse_patch
from jacquez.models import DiffLineRecord


def test_single_hunk_maps_added_line() -> None:
    records = parse_patch("@@ -1,2 +1,3 @@\n line1\n+line2\n line3")

    assert records == [DiffLineRecord(line="line2", diff_position=3, new_file_line=2)]


def test_removed_lines_advance_position_but_not_new_file_line() -> None:
    patch = "@@ -10,3 +10,3 @@\n keep\n-old\n+new\n tail"

    records = parse_patch(patch)

    assert records == [DiffLineRecord(line="new", diff_position=4, new_file_line=11)]


def test_positions_continue_across_hunks() -> None:
    patch = "\n".join(
        [
            "@@ -1,2 +1,3 @@",
            " a",
            "+b",
            " c",
            "@@ -20,2 +21,3 @@",
            " x",
            "+y",
            "+z",
        ]
    )

    records = parse_patch(patch)

    assert [(r.line, r.diff_position, r.new_file_line) for r in records] == [
        ("b", 3, 2),
        ("y", 7, 22),
        ("z", 8, 23),
    ]


def test_headerless_patch_counts_from_zero() -> None:
    records = parse_patch("+first\n context\n+third")

    assert records == [
        DiffLineRecord(line="first", diff_position=1, new_file_line=1),
        DiffLineRecord(line="third", diff_position=3, new_file_line=3),
    ]


def test_file_header_lines_are_not_records() -> None:
    patch = "--- a/app.py\n+++ b/app.py\n@@ -0,0 +1 @@\n+print('hi')"

    records = parse_patch(patch)

    assert records == [DiffLineRecord(line="print('hi')", diff_position=4, new_file_line=1)]


def test_positions_are_increasing_and_bounded_by_line_count() -> None:
    patch = "@@ -1,4 +1,6 @@\n+a\n b\n+c\n-d\n+e\n f\n+g"

    records = parse_patch(patch)
    positions = [record.diff_position for record in records]

    assert positions == sorted(set(positions))
    assert len(records) <= len(patch.split("\n"))
    assert all(1 <= position <= len(patch.split("\n")) for position in positions)


def test_only_newlines_separate_patch_lines() -> None:
    records = parse_patch("@@ -1,2 +1,3 @@\n a\fb\n+added\n tail more\n+last")

    assert [(r.line, r.diff_position, r.new_file_line) for r in records] == [
        ("added", 3, 2),
        ("last", 5, 4),
    ]


def test_missing_patch_yields_nothing() -> None:
    assert parse_patch(None) == []
    assert parse_patch("") == []


def test_diff_patch_can_be_iterated_twice() -> None:
    diff = DiffPatch("@@ -1 +1,2 @@\n a\n+b")

    assert list(diff) == list(diff)
    assert diff.records()[0].new_file_line == 2
