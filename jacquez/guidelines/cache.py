"""Time-bounded in-memory cache for resolved guideline documents."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from ..models import GuidelineDocument

CacheKey = Tuple[str, str, int]


@dataclass(frozen=True)
class CacheEntry:
    document: GuidelineDocument
    timestamp: float


class GuidelineCache:
    """Stores guideline documents keyed by ``(owner, repo, depth)``.

    Entries older than ``ttl`` seconds are evicted when next looked up; nothing
    sweeps them proactively. Construct one per process and share it.
    """

    def __init__(self, ttl: float = 300.0, *, clock: Callable[[], float] | None = None) -> None:
        self.ttl = ttl
        self._clock = clock or time.monotonic
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def get(self, key: CacheKey) -> Optional[GuidelineDocument]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            self._entries.pop(key, None)
            return None
        return entry.document

    def store(self, key: CacheKey, document: GuidelineDocument) -> None:
        self._entries[key] = CacheEntry(document=document, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["CacheEntry", "CacheKey", "GuidelineCache"]
