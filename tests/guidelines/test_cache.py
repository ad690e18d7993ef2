"""Tests for the time-bounded guideline cache."""

from __future__ import annotations

from datetime import UTC, datetime

from jacquez.guidelines.cache import GuidelineCache
from jacquez.models import GuidelineDocument


def _document(content: str = "Be kind") -> GuidelineDocument:
    return GuidelineDocument(
        content=content, source_paths=("CONTRIBUTING.md",), fetched_at=datetime.now(UTC)
    )


def test_entry_served_before_ttl(clock) -> None:
    cache = GuidelineCache(300, clock=clock)
    document = _document()
    cache.store(("acme", "widgets", 0), document)

    clock.advance(299)

    assert cache.get(("acme", "widgets", 0)) is document


def test_entry_evicted_at_ttl(clock) -> None:
    cache = GuidelineCache(300, clock=clock)
    cache.store(("acme", "widgets", 0), _document())

    clock.advance(300)

    assert cache.get(("acme", "widgets", 0)) is None
    assert ("acme", "widgets", 0) not in cache
    assert len(cache) == 0


def test_keys_include_depth(clock) -> None:
    cache = GuidelineCache(300, clock=clock)
    cache.store(("acme", "widgets", 0), _document())

    assert cache.get(("acme", "widgets", 1)) is None


def test_store_replaces_entry_and_refreshes_timestamp(clock) -> None:
    cache = GuidelineCache(10, clock=clock)
    cache.store(("acme", "widgets", 0), _document("old"))
    clock.advance(8)
    cache.store(("acme", "widgets", 0), _document("new"))
    clock.advance(8)

    cached = cache.get(("acme", "widgets", 0))

    assert cached is not None
    assert cached.content == "new"


def test_clear_drops_everything(clock) -> None:
    cache = GuidelineCache(clock=clock)
    cache.store(("acme", "widgets", 0), _document())
    cache.store(("acme", "gadgets", 0), _document())

    cache.clear()

    assert len(cache) == 0
