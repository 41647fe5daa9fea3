"""Unit tests for GitHub GraphQL adapter (mocked API)."""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from unittest.mock import Mock, patch

import pytest
import requests

from prlog.adapters.base import GitPlatformError
from prlog.adapters.github import GitHubAdapter


@pytest.fixture
def adapter() -> GitHubAdapter:
    return GitHubAdapter(token="test-token", api_url="https://api.github.com")


def _ok(body: object) -> Mock:
    resp = Mock()
    resp.status_code = 200
    resp.json.return_value = body
    return resp


def _history_body(nodes: list[dict]) -> dict:
    return {
        "data": {
            "repository": {
                "refs": {
                    "edges": [
                        {"node": {"target": {"history": {"edges": [{"node": n} for n in nodes]}}}},
                    ]
                }
            }
        }
    }


def test_session_sends_bearer_token(adapter: GitHubAdapter) -> None:
    """Token is sent as Authorization: Bearer."""
    assert adapter._session.headers["Authorization"] == "Bearer test-token"


def test_session_is_per_thread(adapter: GitHubAdapter) -> None:
    """Each worker thread gets its own session with the same headers."""
    main_session = adapter._session
    assert adapter._session is main_session

    with ThreadPoolExecutor(max_workers=1) as ex:
        worker_session = ex.submit(lambda: adapter._session).result()

    assert worker_session is not main_session
    assert worker_session.headers["Authorization"] == "Bearer test-token"


def test_graphql_posts_query_and_variables(adapter: GitHubAdapter) -> None:
    """graphql() POSTs to /graphql with query and variables and returns data."""
    with patch.object(adapter._session, "request", return_value=_ok({"data": {"x": 1}})) as req:
        data = adapter.graphql("query { x }", {"a": 1})

    assert data == {"x": 1}
    call_args = req.call_args
    assert call_args[0][0] == "POST"
    assert call_args[0][1] == "https://api.github.com/graphql"
    assert call_args[1]["json"] == {"query": "query { x }", "variables": {"a": 1}}


def test_graphql_http_error_raises(adapter: GitHubAdapter) -> None:
    """HTTP status >= 400 raises GitPlatformError with the API message."""
    resp = Mock()
    resp.status_code = 401
    resp.text = "Unauthorized"
    resp.json.return_value = {"message": "Bad credentials"}

    with patch.object(adapter._session, "request", return_value=resp):
        with pytest.raises(GitPlatformError) as exc_info:
            adapter.graphql("query { x }")
    assert "401" in str(exc_info.value)
    assert "Bad credentials" in str(exc_info.value)


def test_graphql_errors_member_raises(adapter: GitHubAdapter) -> None:
    """A 200 response with `errors` raises GitPlatformError."""
    body = {"data": None, "errors": [{"message": "Could not resolve to a Repository"}]}
    with patch.object(adapter._session, "request", return_value=_ok(body)):
        with pytest.raises(GitPlatformError, match="Could not resolve"):
            adapter.graphql("query { x }")


def test_graphql_transport_error_raises(adapter: GitHubAdapter) -> None:
    """Connection errors are wrapped into GitPlatformError."""
    with patch.object(adapter._session, "request", side_effect=requests.ConnectionError("down")):
        with pytest.raises(GitPlatformError, match="down"):
            adapter.graphql("query { x }")


def test_graphql_non_json_raises(adapter: GitHubAdapter) -> None:
    """A body that is not JSON raises GitPlatformError."""
    resp = Mock()
    resp.status_code = 200
    resp.json.side_effect = ValueError("Expecting value")
    with patch.object(adapter._session, "request", return_value=resp):
        with pytest.raises(GitPlatformError):
            adapter.graphql("query { x }")


def test_fetch_history_page_returns_nodes(adapter: GitHubAdapter) -> None:
    """fetch_history_page unwraps edges into raw nodes and binds window as variables."""
    nodes = [
        {"author": {"user": {"login": "alice"}}, "message": "B (#2)", "authoredDate": "2023-01-02T00:00:00Z"},
        {"author": {"user": {"login": "bob"}}, "message": "A (#1)", "authoredDate": "2023-01-01T00:00:00Z"},
    ]
    since = datetime(2022, 12, 1, tzinfo=UTC)
    until = datetime(2023, 2, 1, tzinfo=UTC)

    with patch.object(adapter._session, "request", return_value=_ok(_history_body(nodes))) as req:
        result = adapter.fetch_history_page("boa-dev", "boa", since=since, until=until, branch="main")

    assert result == nodes
    variables = req.call_args[1]["json"]["variables"]
    assert variables == {
        "owner": "boa-dev",
        "name": "boa",
        "branch": "main",
        "since": "2022-12-01T00:00:00+00:00",
        "until": "2023-02-01T00:00:00+00:00",
        "first": 100,
    }
    query = req.call_args[1]["json"]["query"]
    assert "boa-dev" not in query
    assert 'refPrefix: "refs/heads/"' in query


def test_fetch_history_page_empty(adapter: GitHubAdapter) -> None:
    """An empty history is an empty list, not an error."""
    with patch.object(adapter._session, "request", return_value=_ok(_history_body([]))):
        result = adapter.fetch_history_page(
            "o", "r", since=datetime(2023, 1, 1, tzinfo=UTC), until=datetime(2023, 2, 1, tzinfo=UTC)
        )
    assert result == []


def test_fetch_history_page_missing_branch_raises(adapter: GitHubAdapter) -> None:
    """No matching ref (empty refs.edges) raises GitPlatformError."""
    body = {"data": {"repository": {"refs": {"edges": []}}}}
    with patch.object(adapter._session, "request", return_value=_ok(body)):
        with pytest.raises(GitPlatformError):
            adapter.fetch_history_page(
                "o", "r", since=datetime(2023, 1, 1, tzinfo=UTC), until=datetime(2023, 2, 1, tzinfo=UTC)
            )


def test_get_pull_request_labels_in_order(adapter: GitHubAdapter) -> None:
    """Labels are returned in API order, with number and limit as variables."""
    body = {
        "data": {
            "repository": {
                "pullRequest": {
                    "labels": {"edges": [{"node": {"name": "Internal"}}, {"node": {"name": "bug"}}]}
                }
            }
        }
    }
    with patch.object(adapter._session, "request", return_value=_ok(body)) as req:
        labels = adapter.get_pull_request_labels("o", "r", 42)

    assert labels == ["Internal", "bug"]
    assert req.call_args[1]["json"]["variables"] == {"owner": "o", "name": "r", "number": 42, "first": 10}


def test_get_pull_request_labels_missing_pr_raises(adapter: GitHubAdapter) -> None:
    """pullRequest null (e.g. number is an issue) raises GitPlatformError."""
    body = {"data": {"repository": {"pullRequest": None}}}
    with patch.object(adapter._session, "request", return_value=_ok(body)):
        with pytest.raises(GitPlatformError):
            adapter.get_pull_request_labels("o", "r", 7)


def test_get_latest_release_date(adapter: GitHubAdapter) -> None:
    """Latest release date comes from the tag commit."""
    body = {"data": {"repository": {"latestRelease": {"tagCommit": {"committedDate": "2022-06-11T10:00:00Z"}}}}}
    with patch.object(adapter._session, "request", return_value=_ok(body)):
        date = adapter.get_latest_release_date("o", "r")
    assert date == datetime(2022, 6, 11, 10, 0, tzinfo=UTC)


def test_get_latest_release_date_none_without_release(adapter: GitHubAdapter) -> None:
    """Repository without releases yields None."""
    body = {"data": {"repository": {"latestRelease": None}}}
    with patch.object(adapter._session, "request", return_value=_ok(body)):
        assert adapter.get_latest_release_date("o", "r") is None
