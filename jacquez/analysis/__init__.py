"""Violation aggregation and supporting codebase analysis."""

from .aggregator import aggregate, review_comments, summarize

__all__ = ["aggregate", "review_comments", "summarize"]
