"""Guideline judgments and tolerant parsing of model output."""

from .judge import JUDGMENT_ERROR_REASONING, MISSING_DESCRIPTION_COMMENT, Judge
from .parser import parse_description_judgment, parse_file_findings

__all__ = [
    "JUDGMENT_ERROR_REASONING",
    "Judge",
    "MISSING_DESCRIPTION_COMMENT",
    "parse_description_judgment",
    "parse_file_findings",
]
