"""Contributing guideline resolution."""

from .cache import GuidelineCache
from .links import LinkTarget, MarkdownLink, RepositoryLinks
from .resolver import CANDIDATE_PATHS, MAX_DEPTH, GuidelineResolver

__all__ = [
    "CANDIDATE_PATHS",
    "GuidelineCache",
    "GuidelineResolver",
    "LinkTarget",
    "MAX_DEPTH",
    "MarkdownLink",
    "RepositoryLinks",
]
