"""CLI parser behaviour tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from jacquez import cli
from jacquez.cli import _build_parser, _split_repository
from jacquez.models import GuidelineDocument


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "check"])
    assert args.verbose is True
    assert args.command == "check"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["guidelines", "acme/widgets", "--verbose"])
    assert args.verbose is True
    assert args.repository == "acme/widgets"


def test_cli_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--port", "9000"])
    assert args.command == "serve"
    assert args.port == 9000
    assert args.host == "0.0.0.0"


def test_split_repository() -> None:
    assert _split_repository("acme/widgets") == ("acme", "widgets")
    with pytest.raises(ValueError):
        _split_repository("acme")
    with pytest.raises(ValueError):
        _split_repository("acme/widgets/extra")


def test_check_exits_with_action_code(monkeypatch) -> None:
    calls: list[dict] = []

    def fake_run_action(**kwargs) -> int:
        calls.append(kwargs)
        return 1

    monkeypatch.setattr(cli, "run_action", fake_run_action)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-v", "check"])

    assert excinfo.value.code == 1
    assert calls == [{"verbose": True}]


def test_guidelines_prints_document(monkeypatch, capsys, tmp_path) -> None:
    class FakeResolver:
        def __init__(self, client) -> None:
            pass

        def resolve(self, owner: str, repo: str):
            return GuidelineDocument(
                content="Write tests.",
                source_paths=("CONTRIBUTING.md",),
                fetched_at=datetime.now(UTC),
            )

    monkeypatch.setattr(cli, "GuidelineResolver", FakeResolver)

    cli.main(["guidelines", "acme/widgets", "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert "# Sources: CONTRIBUTING.md" in out
    assert "Write tests." in out
