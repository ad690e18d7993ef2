"""Locates contributing guidelines and expands the documents they link to."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..errors import GitHubError
from ..github.client import GitHubClient
from ..logging import get_logger
from ..models import GuidelineDocument
from .cache import GuidelineCache
from .links import MarkdownLink, RepositoryLinks

CANDIDATE_PATHS: Tuple[str, ...] = (
    "CONTRIBUTING.md",
    "contributing.md",
    ".github/CONTRIBUTING.md",
    "docs/CONTRIBUTING.md",
)

MAX_DEPTH = 3

# raw.githubusercontent.com accepts HEAD as an alias for the default branch.
_FALLBACK_REF = "HEAD"


@dataclass(frozen=True)
class _PendingLink:
    link: MarkdownLink
    url: str
    path: str
    depth: int


class GuidelineResolver:
    """Resolves a repository's contributing guidelines into one document.

    The root document is the first of ``CANDIDATE_PATHS`` that exists. Markdown
    links in it are followed up to ``MAX_DEPTH``: documents at
    depth ``MAX_DEPTH - 1`` are included but their links are not expanded. A
    single visited set is shared across the whole expansion, and a URL is
    marked visited before it is fetched, so link cycles terminate and no URL is
    fetched twice. Failures on linked documents are logged and skipped.
    """

    def __init__(
        self,
        client: GitHubClient,
        cache: GuidelineCache | None = None,
        *,
        candidate_paths: Sequence[str] = CANDIDATE_PATHS,
    ) -> None:
        self.client = client
        self.cache = cache
        self.candidate_paths = tuple(candidate_paths)
        self.logger = get_logger("guidelines")

    def resolve(
        self,
        owner: str,
        repo: str,
        depth: int = 0,
        visited: Optional[Set[str]] = None,
    ) -> Optional[GuidelineDocument]:
        """Return the aggregated guidelines, or ``None`` when the repo has none."""
        key = (owner, repo, depth)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                self.logger.info("Contributing guidelines loaded from cache for %s/%s", owner, repo)
                return cached

        self.logger.info("Loading contributing guidelines for %s/%s", owner, repo)
        root = self._load_root(owner, repo)
        if root is None:
            self.logger.warning("No contributing guidelines found for %s/%s", owner, repo)
            return None
        root_path, root_content = root

        seen = set() if visited is None else visited
        links = RepositoryLinks(owner, repo, default_branch=lambda: self._default_branch(owner, repo))
        sections: List[str] = [root_content.strip()]
        sources: List[str] = [root_path]

        pending: List[_PendingLink] = []
        if depth < MAX_DEPTH - 1:
            children = RepositoryLinks.extract(root_content)
            if children:
                seen.add(links.raw_url(root_path))
            self._push_links(pending, links, children, base_dir=posixpath.dirname(root_path), depth=depth + 1)

        while pending:
            item = pending.pop()
            if item.url in seen:
                continue
            seen.add(item.url)
            try:
                text = self.client.fetch_raw_url(item.url)
            except GitHubError as exc:
                self.logger.debug("Skipping linked guideline %s: %s", item.url, exc)
                continue
            sections.append(_format_linked(item.link, text))
            sources.append(item.url)
            if item.depth < MAX_DEPTH - 1:
                self._push_links(
                    pending,
                    links,
                    RepositoryLinks.extract(text),
                    base_dir=posixpath.dirname(item.path),
                    depth=item.depth + 1,
                )

        document = GuidelineDocument(
            content="\n\n".join(section for section in sections if section),
            source_paths=tuple(sources),
            fetched_at=datetime.now(UTC),
        )
        if self.cache is not None:
            self.cache.store(key, document)
        self.logger.info(
            "Contributing guidelines for %s/%s resolved from %d document(s)",
            owner,
            repo,
            len(sources),
        )
        return document

    # ------------------------------------------------------------------
    # Internals

    def _load_root(self, owner: str, repo: str) -> Optional[Tuple[str, str]]:
        for path in self.candidate_paths:
            try:
                content = self.client.fetch_file_content(owner, repo, path)
            except GitHubError as exc:
                self.logger.debug("Failed to load contributing guidelines from %s: %s", path, exc)
                continue
            if content:
                self.logger.info("Contributing guidelines found at %s for %s/%s", path, owner, repo)
                return path, content
        return None

    def _default_branch(self, owner: str, repo: str) -> str:
        try:
            return self.client.fetch_default_branch(owner, repo)
        except GitHubError as exc:
            self.logger.debug("Default branch lookup failed for %s/%s: %s", owner, repo, exc)
            return _FALLBACK_REF

    @staticmethod
    def _push_links(
        pending: List[_PendingLink],
        links: RepositoryLinks,
        found: Iterable[MarkdownLink],
        *,
        base_dir: str,
        depth: int,
    ) -> None:
        resolved: List[_PendingLink] = []
        for link in found:
            target = links.resolve(link.target, base_dir=base_dir)
            if target is None:
                continue
            resolved.append(_PendingLink(link=link, url=target.url, path=target.path, depth=depth))
        # Reversed so the stack pops links in document order.
        pending.extend(reversed(resolved))


def _format_linked(link: MarkdownLink, text: str) -> str:
    body = text.strip()
    if not body:
        return ""
    return f"---\n\nLinked guideline: {link.label} ({link.target})\n\n{body}"


__all__ = ["CANDIDATE_PATHS", "GuidelineResolver", "MAX_DEPTH"]
