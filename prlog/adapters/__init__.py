"""Git platform adapters."""

from prlog.adapters.base import GitPlatformAdapter, GitPlatformError
from prlog.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
