"""Merges description and per-file judgments into one violation ledger."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import (
    PR_DESCRIPTION_FILE,
    AnalysisResult,
    DescriptionJudgment,
    DiffLineRecord,
    FileJudgment,
    ReviewComment,
    Violation,
)

NO_VIOLATIONS_SUMMARY = "No contributing guideline violations found"


def aggregate(
    description: Optional[DescriptionJudgment],
    file_judgments: Sequence[FileJudgment],
) -> AnalysisResult:
    """Build the ledger: description violation first, then files in supplied order.

    A finding whose position does not index the file's records is dropped.
    """
    details: List[Violation] = []
    if description is not None and description.comment_needed:
        details.append(
            Violation(file=PR_DESCRIPTION_FILE, line=0, message=description.comment, severity="error")
        )

    for judgment in file_judgments:
        for finding in judgment.findings:
            record = _record_at(judgment, finding.position)
            if record is None or not finding.comment:
                continue
            details.append(
                Violation(
                    file=judgment.filename,
                    line=record.new_file_line,
                    message=finding.comment,
                    severity="error",
                )
            )

    return AnalysisResult(summary=summarize(len(details)), details=tuple(details))


def summarize(violation_count: int) -> str:
    if violation_count > 0:
        return f"Found {violation_count} violation(s) in this PR"
    return NO_VIOLATIONS_SUMMARY


def review_comments(file_judgments: Sequence[FileJudgment]) -> List[ReviewComment]:
    """Inline review comments for valid findings, addressed by diff position."""
    comments: List[ReviewComment] = []
    for judgment in file_judgments:
        for finding in judgment.findings:
            record = _record_at(judgment, finding.position)
            if record is None or not finding.comment:
                continue
            comments.append(
                ReviewComment(path=judgment.filename, position=record.diff_position, body=finding.comment)
            )
    return comments


def _record_at(judgment: FileJudgment, index: int) -> Optional[DiffLineRecord]:
    if 0 <= index < len(judgment.records):
        return judgment.records[index]
    return None


__all__ = ["NO_VIOLATIONS_SUMMARY", "aggregate", "review_comments", "summarize"]
