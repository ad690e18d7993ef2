"""Exception types raised by jacquez components."""

from __future__ import annotations


class JacquezError(RuntimeError):
    """Base class for jacquez failures."""


class ConfigError(JacquezError):
    """Raised when the configuration file cannot be parsed."""


class GitHubError(JacquezError):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


class LLMError(JacquezError):
    """Raised when the judgment model cannot produce a response."""


__all__ = ["ConfigError", "GitHubError", "JacquezError", "LLMError"]
