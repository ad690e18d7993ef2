"""Guideline judgments backed by the language model."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import LLMError
from ..llm.runner import LLMRunner
from ..logging import get_logger
from ..models import DescriptionJudgment, DiffLineRecord, FileFinding
from .parser import parse_description_judgment, parse_file_findings
from .prompts import (
    DESCRIPTION_SYSTEM_PROMPT,
    FILE_SYSTEM_PROMPT,
    render,
    render_guidelines,
)

MISSING_DESCRIPTION_COMMENT = (
    "This PR is missing a description. Please add a description explaining what "
    "changes were made and why."
)
JUDGMENT_ERROR_REASONING = "Error occurred during AI analysis, skipping comment to avoid spam"


class Judge:
    """Asks the model whether a submission or a file's changes break the guidelines.

    Transport failures never escape: they degrade to "no comment needed" for
    text submissions and to no findings for files.
    """

    def __init__(self, runner: LLMRunner, *, skip_keywords: Sequence[str] = ("aside",)) -> None:
        self.runner = runner
        self.skip_keywords = tuple(keyword.lower() for keyword in skip_keywords if keyword)
        self.logger = get_logger("judgment")

    def judge_submission(
        self,
        guidelines: str,
        content: str,
        *,
        submission_type: str = "pull request",
        thread_context: str = "",
        codebase_analysis: str = "",
    ) -> DescriptionJudgment:
        if submission_type == "pull request" and not content.strip():
            return DescriptionJudgment(
                comment_needed=True,
                comment=MISSING_DESCRIPTION_COMMENT,
                reasoning="Empty PR description",
            )
        keyword = self.skip_keyword(content)
        if keyword:
            return DescriptionJudgment(
                comment_needed=False,
                comment="",
                reasoning=f"Skipped due to {keyword} keyword",
            )

        prompt = render(
            "submission.j2",
            submission_type=submission_type,
            content=content,
            thread_context=thread_context,
            codebase_analysis=codebase_analysis,
        )
        self.logger.info("Generating AI response for %s", submission_type)
        try:
            text = self.runner.run(
                prompt,
                system=DESCRIPTION_SYSTEM_PROMPT,
                context=render_guidelines(guidelines),
                prefill="{",
            )
        except LLMError as exc:
            self.logger.error("Error generating AI response for %s: %s", submission_type, exc)
            return DescriptionJudgment(
                comment_needed=False, comment="", reasoning=JUDGMENT_ERROR_REASONING
            )
        judgment = parse_description_judgment(text)
        self.logger.debug(
            "Judgment for %s: comment_needed=%s reasoning=%s",
            submission_type,
            judgment.comment_needed,
            judgment.reasoning,
        )
        return judgment

    def judge_file(
        self, guidelines: str, filename: str, records: Sequence[DiffLineRecord]
    ) -> List[FileFinding]:
        if not records:
            return []
        prompt = render("file_changes.j2", filename=filename, records=records)
        try:
            text = self.runner.run(
                prompt,
                system=FILE_SYSTEM_PROMPT,
                context=render_guidelines(guidelines),
                prefill="[",
            )
        except LLMError as exc:
            self.logger.error("Error analyzing file %s: %s", filename, exc)
            return []
        findings = parse_file_findings(text)
        self.logger.debug("Model reported %d finding(s) for %s", len(findings), filename)
        return findings

    def skip_keyword(self, content: str) -> str | None:
        lowered = content.lower()
        for keyword in self.skip_keywords:
            if keyword in lowered:
                return keyword
        return None


__all__ = ["JUDGMENT_ERROR_REASONING", "Judge", "MISSING_DESCRIPTION_COMMENT"]
