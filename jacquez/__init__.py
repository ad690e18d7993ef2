"""Contributing-guideline checks for GitHub pull requests, issues and comments."""

__version__ = "0.1.0"
