"""Check-run reporting."""

from .check_run import (
    ANNOTATION_TITLE,
    CHECK_NAME,
    MAX_ANNOTATIONS,
    CheckRunReporter,
    build_report,
    group_by_file,
)

__all__ = [
    "ANNOTATION_TITLE",
    "CHECK_NAME",
    "CheckRunReporter",
    "MAX_ANNOTATIONS",
    "build_report",
    "group_by_file",
]
