"""Core data models shared across jacquez components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

Severity = Literal["error", "warning"]

PR_DESCRIPTION_FILE = "PR Description"


@dataclass(frozen=True)
class GuidelineDocument:
    """Aggregated contributing guidelines for a repository."""

    content: str
    source_paths: Tuple[str, ...]
    fetched_at: datetime


@dataclass(frozen=True)
class DiffLineRecord:
    """An added line of a patch with its diff position and new-file line number."""

    line: str
    diff_position: int
    new_file_line: int


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by a pull request, as listed by the GitHub API."""

    filename: str
    status: str
    patch: Optional[str] = None


@dataclass(frozen=True)
class DescriptionJudgment:
    """Verdict for free-form text (PR description, issue body or comment)."""

    comment_needed: bool
    comment: str = ""
    reasoning: str = ""


@dataclass(frozen=True)
class FileFinding:
    """A single code-level finding; ``position`` indexes the file's added lines."""

    position: int
    comment: str


@dataclass(frozen=True)
class FileJudgment:
    """Findings reported for one changed file alongside its diff coordinates."""

    filename: str
    records: Tuple[DiffLineRecord, ...]
    findings: Tuple[FileFinding, ...] = ()


@dataclass(frozen=True)
class Violation:
    """A guideline violation attributed to a file and line (0 for none)."""

    file: str
    line: int
    message: str
    severity: Severity = "error"


@dataclass(frozen=True)
class AnalysisResult:
    """Ledger of violations for a single pull request analysis."""

    summary: str
    details: Tuple[Violation, ...] = ()

    @property
    def violation_count(self) -> int:
        return len(self.details)

    @property
    def violations_found(self) -> bool:
        return self.violation_count > 0


@dataclass(frozen=True)
class ReviewComment:
    """Inline review comment addressed by diff position."""

    path: str
    position: int
    body: str

    def to_payload(self) -> Dict[str, object]:
        return {"path": self.path, "position": self.position, "body": self.body}


@dataclass
class CheckRunReport:
    """Rendered check-run output ready for the GitHub API."""

    conclusion: str
    title: str
    summary: str
    annotations: List[Dict[str, object]] = field(default_factory=list)

    def output(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "summary": self.summary,
            "annotations": list(self.annotations),
        }
