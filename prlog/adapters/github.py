"""GitHub GraphQL API adapter."""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List

import requests

from prlog.adapters.base import GitPlatformAdapter, GitPlatformError
from prlog.queries import HISTORY_QUERY, LABELS_QUERY, LATEST_RELEASE_QUERY

LOG = logging.getLogger("prlog.adapters.github")


def _parse_iso(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists; raise GitPlatformError when a step is missing."""
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            raise GitPlatformError(f"Unexpected response shape at {step!r}") from None
        if current is None:
            raise GitPlatformError(f"Missing value at {step!r}")
    return current


class GitHubAdapter(GitPlatformAdapter):
    """GitHub GraphQL implementation of GitPlatformAdapter."""

    def __init__(
        self,
        token: str | None = None,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        # Label lookups run on a thread pool; each thread gets its own session
        self._local = threading.local()

    @property
    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(
                {
                    "Accept": "application/vnd.github+json",
                    "User-Agent": "prlog",
                }
            )
            if self.token:
                session.headers["Authorization"] = f"Bearer {self.token}"
            self._local.session = session
        return session

    def graphql(self, query: str, variables: Dict[str, Any] | None = None) -> Dict[str, Any]:
        """Run one GraphQL query and return its `data` member.

        Raises:
            GitPlatformError: On transport failure, HTTP error, GraphQL
                errors or a body without `data`.
        """
        url = f"{self.api_url}/graphql"
        payload = {"query": query, "variables": variables or {}}
        try:
            resp = self._session.request("POST", url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitPlatformError(f"GraphQL request failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text
            try:
                data = resp.json()
                if "message" in data:
                    msg = data["message"]
            except Exception:
                pass
            raise GitPlatformError(f"GitHub API error {resp.status_code}: {msg}")
        try:
            body = resp.json()
        except ValueError as e:
            raise GitPlatformError(f"GraphQL response is not JSON: {e}") from e
        if not isinstance(body, dict):
            raise GitPlatformError("GraphQL response is not an object")
        if body.get("errors"):
            raise GitPlatformError(f"GraphQL errors: {body['errors']}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise GitPlatformError("GraphQL response has no data")
        return data

    def fetch_history_page(
        self,
        owner: str,
        repo: str,
        since: datetime,
        until: datetime,
        branch: str = "main",
        first: int = 100,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of branch history between since and until.

        Returns the raw `node` documents (author.user.login, message,
        authoredDate) in the order GitHub lists them, newest first.
        """
        variables = {
            "owner": owner,
            "name": repo,
            "branch": branch,
            "since": since.isoformat(),
            "until": until.isoformat(),
            "first": first,
        }
        data = self.graphql(HISTORY_QUERY, variables)
        edges = _dig(data, "repository", "refs", "edges", 0, "node", "target", "history", "edges")
        if not isinstance(edges, list):
            raise GitPlatformError("history.edges is not a list")
        nodes: List[Dict[str, Any]] = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, dict) else None
            if isinstance(node, dict):
                nodes.append(node)
        LOG.debug("History page %s..%s: %d entries", since.isoformat(), until.isoformat(), len(nodes))
        return nodes

    def get_pull_request_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        first: int = 10,
    ) -> List[str]:
        """Return names of the first `first` labels on a pull request.

        Raises:
            GitPlatformError: If the request fails or the pull request
                cannot be found in the response.
        """
        variables = {"owner": owner, "name": repo, "number": number, "first": first}
        data = self.graphql(LABELS_QUERY, variables)
        edges = _dig(data, "repository", "pullRequest", "labels", "edges")
        if not isinstance(edges, list):
            raise GitPlatformError("labels.edges is not a list")
        names: List[str] = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, dict) else None
            name = node.get("name") if isinstance(node, dict) else None
            if isinstance(name, str):
                names.append(name)
        return names

    def get_latest_release_date(self, owner: str, repo: str) -> datetime | None:
        """Return the committed date of the latest release's tag commit.

        Returns None when the repository has no release.
        """
        data = self.graphql(LATEST_RELEASE_QUERY, {"owner": owner, "name": repo})
        repository = _dig(data, "repository")
        if not isinstance(repository, dict):
            raise GitPlatformError("repository is not an object")
        release = repository.get("latestRelease")
        if release is None:
            return None
        committed = _dig(release, "tagCommit", "committedDate")
        try:
            return _parse_iso(committed)
        except (ValueError, TypeError, AttributeError) as e:
            raise GitPlatformError(f"Invalid release date: {committed!r}") from e
