"""Tests for tolerant parsing of primed model output."""

from __future__ import annotations

from jacquez.judgment.parser import (
    REPAIRED_REASONING,
    UNPARSABLE_REASONING,
    first_success,
    parse_description_judgment,
    parse_file_findings,
    repair_truncated,
)
from jacquez.models import DescriptionJudgment, FileFinding


def test_truncated_judgment_is_repaired() -> None:
    judgment = parse_description_judgment('"comment_needed": true, "comment": "Please add')

    assert judgment == DescriptionJudgment(
        comment_needed=True, comment="Please add", reasoning=REPAIRED_REASONING
    )


def test_sentinel_means_no_comment() -> None:
    judgment = parse_description_judgment("NO_COMMENT_NEEDED - everything looks good")

    assert judgment.comment_needed is False
    assert judgment.comment == ""


def test_continuation_without_opening_brace_parses_strictly() -> None:
    text = '"comment_needed": false, "comment": "", "reasoning": "Looks fine"}'

    judgment = parse_description_judgment(text)

    assert judgment == DescriptionJudgment(comment_needed=False, comment="", reasoning="Looks fine")


def test_complete_object_with_opening_brace_is_accepted() -> None:
    text = '{"comment_needed": true, "comment": "Link an issue.", "reasoning": "No issue"}'

    judgment = parse_description_judgment(text)

    assert judgment.comment_needed is True
    assert judgment.comment == "Link an issue."
    assert judgment.reasoning == "No issue"


def test_missing_closing_brace_keeps_reasoning() -> None:
    text = '"comment_needed": true, "comment": "Add tests", "reasoning": "No tests"'

    judgment = parse_description_judgment(text)

    assert judgment.reasoning == "No tests"
    assert judgment.comment == "Add tests"


def test_garbage_falls_back_to_safe_default() -> None:
    judgment = parse_description_judgment("I cannot answer that.")

    assert judgment == DescriptionJudgment(
        comment_needed=False, comment="", reasoning=UNPARSABLE_REASONING
    )


def test_empty_text_falls_back_to_safe_default() -> None:
    assert parse_description_judgment("").reasoning == UNPARSABLE_REASONING


def test_file_findings_from_continuation() -> None:
    text = '{"position": 0, "comment": "Use snake_case"}, {"position": 2, "comment": "Add docs"}]'

    assert parse_file_findings(text) == [
        FileFinding(position=0, comment="Use snake_case"),
        FileFinding(position=2, comment="Add docs"),
    ]


def test_file_findings_drop_malformed_items() -> None:
    text = '[{"position": "1", "comment": "x"}, {"position": true, "comment": "y"}, {"position": 3, "comment": " "}, {"position": 4, "comment": "ok"}]'

    assert parse_file_findings(text) == [FileFinding(position=4, comment="ok")]


def test_file_findings_repair_truncation() -> None:
    text = '{"position": 1, "comment": "Missing type hi'

    assert parse_file_findings(text) == [FileFinding(position=1, comment="Missing type hi")]


def test_file_findings_empty_and_unparsable() -> None:
    assert parse_file_findings("]") == []
    assert parse_file_findings("NO_COMMENT_NEEDED") == []
    assert parse_file_findings("nothing to report") == []


def test_repair_truncated_closes_nested_structures() -> None:
    assert repair_truncated('{"a": [1, {"b": "c') == '{"a": [1, {"b": "c"}]}'
    assert repair_truncated('{"a": ') == '{"a": null}'
    assert repair_truncated('[1, 2,') == "[1, 2]"


def test_first_success_returns_first_non_none() -> None:
    calls = []

    def none(text: str):
        calls.append("none")
        return None

    def value(text: str):
        calls.append("value")
        return text.upper()

    def unreachable(text: str):
        calls.append("unreachable")
        return "never"

    assert first_success([none, value, unreachable], "ok") == "OK"
    assert calls == ["none", "value"]
    assert first_success([none], "ok") is None
