"""GitHub REST access."""

from .client import GitHubClient, HTTPRequest, HTTPResponse

__all__ = ["GitHubClient", "HTTPRequest", "HTTPResponse"]
