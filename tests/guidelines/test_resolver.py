"""Tests for guideline resolution and bounded link expansion."""

from __future__ import annotations

from jacquez.errors import GitHubError
from jacquez.guidelines.cache import GuidelineCache
from jacquez.guidelines.resolver import CANDIDATE_PATHS, GuidelineResolver
from tests._fixtures.github import FakeGitHub, raw


def test_returns_none_when_no_candidate_exists(github: FakeGitHub) -> None:
    resolver = GuidelineResolver(github)

    assert resolver.resolve("acme", "widgets") is None
    assert github.file_calls == list(CANDIDATE_PATHS)


def test_root_document_without_links() -> None:
    github = FakeGitHub(files={"CONTRIBUTING.md": "# Contributing\n\nWrite tests.\n"})

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert document.content == "# Contributing\n\nWrite tests."
    assert document.source_paths == ("CONTRIBUTING.md",)
    assert github.raw_calls == []


def test_falls_back_through_candidate_paths() -> None:
    github = FakeGitHub(
        files={".github/CONTRIBUTING.md": "See [style](STYLE.md)."},
        raw={raw(".github/STYLE.md"): "Use black."},
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert document.source_paths == (".github/CONTRIBUTING.md", raw(".github/STYLE.md"))
    assert github.file_calls == ["CONTRIBUTING.md", "contributing.md", ".github/CONTRIBUTING.md"]


def test_linked_documents_are_appended_in_document_order() -> None:
    github = FakeGitHub(
        files={"CONTRIBUTING.md": "Read [style](docs/STYLE.md) and [tests](docs/TESTING.md)."},
        raw={
            raw("docs/STYLE.md"): "Style rules",
            raw("docs/TESTING.md"): "Testing rules",
        },
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert document.content == (
        "Read [style](docs/STYLE.md) and [tests](docs/TESTING.md).\n\n"
        "---\n\nLinked guideline: style (docs/STYLE.md)\n\nStyle rules\n\n"
        "---\n\nLinked guideline: tests (docs/TESTING.md)\n\nTesting rules"
    )


def test_cyclic_links_fetch_each_url_once() -> None:
    github = FakeGitHub(
        files={"CONTRIBUTING.md": "[style](docs/STYLE.md) [tests](docs/TESTING.md)"},
        raw={
            raw("docs/STYLE.md"): "[tests](TESTING.md) [back](../CONTRIBUTING.md)",
            raw("docs/TESTING.md"): "[style](STYLE.md)",
        },
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert sorted(github.raw_calls) == sorted(set(github.raw_calls))
    assert github.raw_calls == [raw("docs/STYLE.md"), raw("docs/TESTING.md")]
    assert raw("CONTRIBUTING.md") not in github.raw_calls


def test_expansion_stops_at_max_depth() -> None:
    github = FakeGitHub(
        files={"CONTRIBUTING.md": "[a](a.md)"},
        raw={
            raw("a.md"): "[b](b.md)",
            raw("b.md"): "[c](c.md)",
            raw("c.md"): "[d](d.md)",
        },
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert github.raw_calls == [raw("a.md"), raw("b.md")]
    assert "Linked guideline: c" not in document.content


def test_failed_link_is_skipped() -> None:
    github = FakeGitHub(
        files={"CONTRIBUTING.md": "[gone](missing.md) [ok](ok.md)"},
        raw={raw("ok.md"): "Still here"},
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert github.raw_calls == [raw("missing.md"), raw("ok.md")]
    assert "Still here" in document.content
    assert "gone" not in document.content.split("\n\n", 1)[1]


def test_default_branch_failure_falls_back_to_head() -> None:
    class NoBranchGitHub(FakeGitHub):
        def fetch_default_branch(self, owner: str, repo: str) -> str:
            raise GitHubError("boom", status=500)

    head_url = raw("docs/STYLE.md", ref="HEAD")
    github = NoBranchGitHub(
        files={"CONTRIBUTING.md": "[style](docs/STYLE.md)"},
        raw={head_url: "Style rules"},
    )

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert github.raw_calls == [head_url]


def test_candidate_errors_move_on_to_next_path() -> None:
    class FlakyGitHub(FakeGitHub):
        def fetch_file_content(self, owner: str, repo: str, path: str):
            if path == "CONTRIBUTING.md":
                self.file_calls.append(path)
                raise GitHubError("forbidden", status=403)
            return super().fetch_file_content(owner, repo, path)

    github = FlakyGitHub(files={"contributing.md": "lowercase rules"})

    document = GuidelineResolver(github).resolve("acme", "widgets")

    assert document is not None
    assert document.source_paths == ("contributing.md",)


def test_cache_serves_repeat_lookups_until_ttl(clock) -> None:
    github = FakeGitHub(files={"CONTRIBUTING.md": "Rules"})
    resolver = GuidelineResolver(github, GuidelineCache(300, clock=clock))

    first = resolver.resolve("acme", "widgets")
    clock.advance(120)
    second = resolver.resolve("acme", "widgets")

    assert first is second
    assert github.file_calls == ["CONTRIBUTING.md"]

    clock.advance(300)
    third = resolver.resolve("acme", "widgets")

    assert third is not None and third is not first
    assert github.file_calls == ["CONTRIBUTING.md", "CONTRIBUTING.md"]


def test_missing_guidelines_are_not_cached(clock) -> None:
    github = FakeGitHub()
    cache = GuidelineCache(300, clock=clock)
    resolver = GuidelineResolver(github, cache)

    resolver.resolve("acme", "widgets")

    assert len(cache) == 0
