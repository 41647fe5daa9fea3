"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Read-only query interface used by the changelog pipeline."""

    @abstractmethod
    def fetch_history_page(
        self,
        owner: str,
        repo: str,
        since: datetime,
        until: datetime,
        branch: str = "main",
        first: int = 100,
    ) -> List[Dict[str, Any]]:
        """Fetch up to `first` raw history nodes authored in (since, until], newest first."""
        ...

    @abstractmethod
    def get_pull_request_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        first: int = 10,
    ) -> List[str]:
        """Return label names of a pull request in the order the platform lists them."""
        ...

    def get_latest_release_date(self, owner: str, repo: str) -> datetime | None:
        """Date of the latest release's tag commit, or None. Override if needed."""
        raise NotImplementedError("get_latest_release_date")
