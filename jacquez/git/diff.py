"""Unified diff coordinate mapping."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional

from ..models import DiffLineRecord

_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


class DiffPatch:
    """Iterable view over the added lines of a unified diff patch.

    Every line of the patch, hunk headers included, advances the diff position.
    A hunk header resets the new-file line counter to the start of its ``+c,d``
    range; context and added lines advance it, removed lines do not. Only added
    lines are yielded. Iterating twice re-scans the patch from the start.
    """

    def __init__(self, patch: Optional[str]) -> None:
        self.patch = patch or ""

    def __iter__(self) -> Iterator[DiffLineRecord]:
        position = 0
        new_line = 0
        for raw in self.patch.split("\n"):
            position += 1
            if raw.startswith("@@"):
                match = _HUNK_HEADER.match(raw)
                if match:
                    new_line = int(match.group(1)) - 1
                continue
            if raw.startswith("+"):
                if raw.startswith("+++"):
                    continue
                new_line += 1
                yield DiffLineRecord(line=raw[1:], diff_position=position, new_file_line=new_line)
            elif raw.startswith(" "):
                new_line += 1

    def records(self) -> List[DiffLineRecord]:
        return list(self)


def parse_patch(patch: Optional[str]) -> List[DiffLineRecord]:
    """Return the added-line records for ``patch``; empty for a missing patch."""
    return DiffPatch(patch).records()


__all__ = ["DiffPatch", "parse_patch"]
