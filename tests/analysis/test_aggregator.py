"""Tests for merging judgments into the violation ledger."""

from __future__ import annotations

from jacquez.analysis.aggregator import NO_VIOLATIONS_SUMMARY, aggregate, review_comments
from jacquez.models import (
    PR_DESCRIPTION_FILE,
    DescriptionJudgment,
    DiffLineRecord,
    FileFinding,
    FileJudgment,
    ReviewComment,
    Violation,
)

RECORDS = (
    DiffLineRecord(line="a = 1", diff_position=2, new_file_line=10),
    DiffLineRecord(line="b = 2", diff_position=4, new_file_line=12),
)


def test_description_violation_comes_first() -> None:
    result = aggregate(
        DescriptionJudgment(comment_needed=True, comment="Describe the change"),
        [FileJudgment("app.py", RECORDS, (FileFinding(position=1, comment="Name this"),))],
    )

    assert result.details == (
        Violation(file=PR_DESCRIPTION_FILE, line=0, message="Describe the change"),
        Violation(file="app.py", line=12, message="Name this"),
    )
    assert result.summary == "Found 2 violation(s) in this PR"


def test_counts_match_details() -> None:
    result = aggregate(
        DescriptionJudgment(comment_needed=False),
        [FileJudgment("app.py", RECORDS, (FileFinding(0, "x"), FileFinding(1, "y")))],
    )

    assert result.violation_count == len(result.details) == 2
    assert result.violations_found is True


def test_out_of_range_positions_are_dropped() -> None:
    result = aggregate(
        None,
        [FileJudgment("app.py", RECORDS, (FileFinding(2, "past end"), FileFinding(-1, "negative")))],
    )

    assert result.details == ()
    assert result.violations_found is False
    assert result.summary == NO_VIOLATIONS_SUMMARY


def test_files_keep_supplied_order() -> None:
    result = aggregate(
        None,
        [
            FileJudgment("z.py", RECORDS, (FileFinding(0, "first"),)),
            FileJudgment("a.py", RECORDS, (FileFinding(0, "second"),)),
        ],
    )

    assert [violation.file for violation in result.details] == ["z.py", "a.py"]


def test_review_comments_use_diff_positions() -> None:
    comments = review_comments(
        [FileJudgment("app.py", RECORDS, (FileFinding(1, "Name this"), FileFinding(5, "dropped")))]
    )

    assert comments == [ReviewComment(path="app.py", position=4, body="Name this")]
    assert comments[0].to_payload() == {"path": "app.py", "position": 4, "body": "Name this"}
