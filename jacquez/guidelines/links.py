"""Markdown link extraction and repository-relative URL resolution."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urlsplit

RAW_HOST = "raw.githubusercontent.com"
_GITHUB_HOSTS = {"github.com", "www.github.com"}
_SKIPPED_SUFFIXES = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".webp",
    ".ico",
    ".pdf",
    ".zip",
    ".gz",
    ".mp4",
    ".mov",
)


@dataclass(frozen=True)
class MarkdownLink:
    """A ``[label](target)`` occurrence in a markdown document."""

    label: str
    target: str


@dataclass(frozen=True)
class LinkTarget:
    """Raw-content URL for a link plus its path inside the repository."""

    url: str
    path: str


class RepositoryLinks:
    """Resolves markdown link targets to raw URLs within a single repository."""

    _LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

    def __init__(self, owner: str, repo: str, default_branch: Callable[[], str]) -> None:
        self.owner = owner
        self.repo = repo
        self._default_branch = default_branch
        self._branch: Optional[str] = None

    @classmethod
    def extract(cls, markdown: str) -> List[MarkdownLink]:
        links: List[MarkdownLink] = []
        for match in cls._LINK_PATTERN.finditer(markdown):
            target = match.group(2).strip()
            # Drop an optional link title: [label](target "title")
            target = target.split()[0] if target else ""
            if target.startswith("<") and target.endswith(">"):
                target = target[1:-1]
            if target:
                links.append(MarkdownLink(label=match.group(1).strip(), target=target))
        return links

    @property
    def branch(self) -> str:
        if self._branch is None:
            self._branch = self._default_branch()
        return self._branch

    def raw_url(self, path: str, *, ref: str | None = None) -> str:
        return f"https://{RAW_HOST}/{self.owner}/{self.repo}/{ref or self.branch}/{path}"

    def resolve(self, target: str, *, base_dir: str = "") -> Optional[LinkTarget]:
        """Return the raw URL for ``target`` or ``None`` when it must not be followed."""
        if target.startswith(("#", "mailto:", "tel:")):
            return None
        parts = urlsplit(target)
        if parts.scheme or parts.netloc:
            if parts.scheme not in {"http", "https"}:
                return None
            return self._resolve_absolute(parts.netloc.lower(), parts.path)
        return self._resolve_relative(parts.path, base_dir)

    # ------------------------------------------------------------------
    # Internals

    def _resolve_absolute(self, host: str, url_path: str) -> Optional[LinkTarget]:
        segments = [segment for segment in url_path.split("/") if segment]
        if host in _GITHUB_HOSTS:
            # /<owner>/<repo>/blob/<ref>/<path...>
            if len(segments) < 5 or segments[2] not in {"blob", "raw"}:
                return None
            ref_index = 3
        elif host == RAW_HOST:
            # /<owner>/<repo>/<ref>/<path...>
            if len(segments) < 4:
                return None
            ref_index = 2
        else:
            return None
        if not self._is_same_repo(segments[0], segments[1]):
            return None
        path = "/".join(segments[ref_index + 1 :])
        if _is_skipped(path):
            return None
        return LinkTarget(url=self.raw_url(path, ref=segments[ref_index]), path=path)

    def _resolve_relative(self, link_path: str, base_dir: str) -> Optional[LinkTarget]:
        if not link_path:
            return None
        if link_path.startswith("/"):
            joined = link_path.lstrip("/")
        else:
            joined = posixpath.join(base_dir, link_path)
        normalized = posixpath.normpath(joined)
        if normalized in {".", ""} or normalized.startswith(".."):
            return None
        if _is_skipped(normalized):
            return None
        return LinkTarget(url=self.raw_url(normalized), path=normalized)

    def _is_same_repo(self, owner: str, repo: str) -> bool:
        return owner.lower() == self.owner.lower() and repo.lower() == self.repo.lower()


def _is_skipped(path: str) -> bool:
    return path.lower().endswith(_SKIPPED_SUFFIXES)


__all__ = ["LinkTarget", "MarkdownLink", "RepositoryLinks"]
