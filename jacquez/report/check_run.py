"""Renders an analysis ledger as a GitHub check run."""

from __future__ import annotations

from typing import Dict, List, Tuple

from jinja2 import Environment, StrictUndefined

from ..models import PR_DESCRIPTION_FILE, AnalysisResult, CheckRunReport, Violation

CHECK_NAME = "Jacquez - Contributing Guidelines"
ANNOTATION_TITLE = "Contributing Guideline Violation"
# GitHub rejects more than 50 annotations per check-run request.
MAX_ANNOTATIONS = 50

SEVERITY_ICONS = {"error": "❌", "warning": "⚠️"}
ANNOTATION_LEVELS = {"error": "failure", "warning": "warning"}

_SUMMARY_TEMPLATE = (
    "## {{ summary }}\n\n"
    "{% if groups %}"
    "Found {{ count }} contributing guideline violation(s):\n\n"
    "{% for file, violations in groups %}"
    "### {{ file }}\n\n"
    "{% for violation in violations %}"
    "{{ icons[violation.severity] }} "
    "{% if violation.line > 0 %}**Line {{ violation.line }}**: {% endif %}"
    "{{ violation.message }}\n\n"
    "{% endfor %}"
    "{% endfor %}"
    "\n---\n\n"
    "Please review the violations above and update your PR to follow the contributing guidelines."
    "{% if omitted %}\n\n"
    "_{{ omitted }} annotation(s) beyond the limit of {{ limit }} are listed above "
    "but not attached inline._"
    "{% endif %}"
    "{% else %}"
    "✅ This PR follows all contributing guidelines. Great work!"
    "{% endif %}"
)

_ENV = Environment(autoescape=False, undefined=StrictUndefined)


class CheckRunReporter:
    """Builds the conclusion, title, markdown summary and capped annotations."""

    def __init__(self, *, max_annotations: int = MAX_ANNOTATIONS) -> None:
        self.max_annotations = max_annotations
        self._template = _ENV.from_string(_SUMMARY_TEMPLATE)

    def build_report(self, result: AnalysisResult) -> CheckRunReport:
        annotations = self.annotations(result.details)
        attached = annotations[: self.max_annotations]
        return CheckRunReport(
            conclusion="failure" if result.violations_found else "success",
            title=self.title(result),
            summary=self.render_summary(result, omitted=len(annotations) - len(attached)),
            annotations=attached,
        )

    @staticmethod
    def title(result: AnalysisResult) -> str:
        if result.violations_found:
            return f"{result.violation_count} violation(s) found"
        return "No violations found"

    def render_summary(self, result: AnalysisResult, *, omitted: int = 0) -> str:
        return self._template.render(
            summary=result.summary,
            count=result.violation_count,
            groups=group_by_file(result.details),
            icons=SEVERITY_ICONS,
            omitted=max(omitted, 0),
            limit=self.max_annotations,
        )

    @staticmethod
    def annotations(details: Tuple[Violation, ...]) -> List[Dict[str, object]]:
        """All line-addressable violations as annotations, before capping."""
        return [
            {
                "path": violation.file,
                "start_line": violation.line,
                "end_line": violation.line,
                "annotation_level": ANNOTATION_LEVELS.get(violation.severity, "failure"),
                "message": violation.message,
                "title": ANNOTATION_TITLE,
            }
            for violation in details
            if violation.line > 0 and violation.file != PR_DESCRIPTION_FILE
        ]


def group_by_file(details: Tuple[Violation, ...]) -> List[Tuple[str, List[Violation]]]:
    grouped: Dict[str, List[Violation]] = {}
    for violation in details:
        grouped.setdefault(violation.file, []).append(violation)
    return list(grouped.items())


def build_report(result: AnalysisResult) -> CheckRunReport:
    return CheckRunReporter().build_report(result)


__all__ = [
    "ANNOTATION_TITLE",
    "CHECK_NAME",
    "CheckRunReporter",
    "MAX_ANNOTATIONS",
    "build_report",
    "group_by_file",
]
