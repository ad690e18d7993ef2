"""Patch parsing helpers."""

from .diff import DiffPatch, parse_patch

__all__ = ["DiffPatch", "parse_patch"]
