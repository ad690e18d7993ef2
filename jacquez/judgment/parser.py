"""Tolerant parsing of model output primed with an opening ``{`` or ``[``.

The model continues an assistant turn that already contains the opening
delimiter, so its text normally lacks it. Generation can also stop mid-string.
Each parser runs an ordered list of strategies and takes the first result that
is not ``None``; when all fail it returns a fixed safe default.
"""

from __future__ import annotations

import json
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..models import DescriptionJudgment, FileFinding

T = TypeVar("T")
Strategy = Callable[[str], Optional[T]]

NO_COMMENT_SENTINEL = "NO_COMMENT_NEEDED"

REPAIRED_REASONING = "Repaired from malformed JSON response"
UNPARSABLE_REASONING = (
    "Failed to parse JSON response, skipping comment to avoid posting malformed content"
)
SENTINEL_REASONING = "Model signalled that no comment is needed"

_CLOSERS = {"{": "}", "[": "]"}


def first_success(strategies: Sequence[Strategy[T]], text: str) -> Optional[T]:
    """Return the first non-``None`` strategy result for ``text``."""
    for strategy in strategies:
        result = strategy(text)
        if result is not None:
            return result
    return None


# ----------------------------------------------------------------------
# Description judgments


def parse_description_judgment(text: str) -> DescriptionJudgment:
    result = first_success(_DESCRIPTION_STRATEGIES, text or "")
    if result is None:
        return DescriptionJudgment(comment_needed=False, comment="", reasoning=UNPARSABLE_REASONING)
    return result


def _sentinel_description(text: str) -> Optional[DescriptionJudgment]:
    if text.strip().startswith(NO_COMMENT_SENTINEL):
        return DescriptionJudgment(comment_needed=False, comment="", reasoning=SENTINEL_REASONING)
    return None


def _strict_description(text: str) -> Optional[DescriptionJudgment]:
    data = _decode(_with_opening(text, "{"))
    return _to_description(data)


def _closed_description(text: str) -> Optional[DescriptionJudgment]:
    data = _decode(_with_opening(text, "{").rstrip().rstrip(",") + "}")
    return _to_description(data)


def _repaired_description(text: str) -> Optional[DescriptionJudgment]:
    data = _decode(repair_truncated(_with_opening(text, "{")))
    judgment = _to_description(data)
    if judgment is None:
        return None
    return DescriptionJudgment(
        comment_needed=judgment.comment_needed,
        comment=judgment.comment,
        reasoning=REPAIRED_REASONING,
    )


def _to_description(data: Any) -> Optional[DescriptionJudgment]:
    if not isinstance(data, dict) or "comment_needed" not in data:
        return None
    return DescriptionJudgment(
        comment_needed=_as_bool(data.get("comment_needed")),
        comment=_as_text(data.get("comment")),
        reasoning=_as_text(data.get("reasoning")),
    )


_DESCRIPTION_STRATEGIES: Tuple[Strategy[DescriptionJudgment], ...] = (
    _sentinel_description,
    _strict_description,
    _closed_description,
    _repaired_description,
)


# ----------------------------------------------------------------------
# File judgments


def parse_file_findings(text: str) -> List[FileFinding]:
    result = first_success(_FILE_STRATEGIES, text or "")
    return result if result is not None else []


def _sentinel_findings(text: str) -> Optional[List[FileFinding]]:
    if text.strip().startswith(NO_COMMENT_SENTINEL):
        return []
    return None


def _strict_findings(text: str) -> Optional[List[FileFinding]]:
    return _to_findings(_decode(_with_opening(text, "[")))


def _closed_findings(text: str) -> Optional[List[FileFinding]]:
    return _to_findings(_decode(_with_opening(text, "[").rstrip().rstrip(",") + "]"))


def _repaired_findings(text: str) -> Optional[List[FileFinding]]:
    return _to_findings(_decode(repair_truncated(_with_opening(text, "["))))


def _to_findings(data: Any) -> Optional[List[FileFinding]]:
    if not isinstance(data, list):
        return None
    findings: List[FileFinding] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        position = item.get("position")
        comment = item.get("comment")
        if isinstance(position, bool) or not isinstance(position, int):
            continue
        if not isinstance(comment, str) or not comment.strip():
            continue
        findings.append(FileFinding(position=position, comment=comment.strip()))
    return findings


_FILE_STRATEGIES: Tuple[Strategy[List[FileFinding]], ...] = (
    _sentinel_findings,
    _strict_findings,
    _closed_findings,
    _repaired_findings,
)


# ----------------------------------------------------------------------
# Helpers


def repair_truncated(text: str) -> str:
    """Close an unterminated string and any open objects or arrays in ``text``."""
    stack: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(_CLOSERS[char])
        elif char in ("}", "]") and stack and stack[-1] == char:
            stack.pop()

    repaired = text
    if in_string:
        if escaped:
            repaired = repaired[:-1]
        repaired += '"'
    else:
        repaired = repaired.rstrip()
        if repaired.endswith(":"):
            repaired += " null"
        repaired = repaired.rstrip(",")
    return repaired + "".join(reversed(stack))


def _with_opening(text: str, opening: str) -> str:
    stripped = text.strip()
    if stripped.startswith(opening):
        return stripped
    return opening + stripped


def _decode(candidate: str) -> Any:
    try:
        value, _ = json.JSONDecoder().raw_decode(candidate)
    except json.JSONDecodeError:
        return None
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


__all__ = [
    "NO_COMMENT_SENTINEL",
    "REPAIRED_REASONING",
    "UNPARSABLE_REASONING",
    "first_success",
    "parse_description_judgment",
    "parse_file_findings",
    "repair_truncated",
]
