"""Walk branch history backwards in windows of at most one page.

GitHub returns at most 100 history entries per query. Each page is
requested for the window (since, until]; the next window ends one second
before the oldest entry of the current page, so windows never overlap and
every step moves towards `since`. The walk ends on the first empty page.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Iterable, List

from prlog.adapters.base import GitPlatformAdapter, GitPlatformError
from prlog.models import Commit
from prlog.services.commit_parser import CommitParseError, parse_authored_date, parse_commit

LOG = logging.getLogger("prlog.history")

PAGE_SIZE = 100
WINDOW_STEP = timedelta(seconds=1)


class HistoryBoundaryError(RuntimeError):
    """Next window boundary is not representable (datetime underflow)."""


def next_until(oldest: datetime) -> datetime:
    """Upper bound of the next window: one second before `oldest`."""
    try:
        return oldest - WINDOW_STEP
    except OverflowError as e:
        raise HistoryBoundaryError(
            f"Can't move window below {oldest.isoformat()}: subtracting {WINDOW_STEP} underflows"
        ) from e


def parse_since(value: str | datetime) -> datetime:
    """Accept ISO-8601 text or a datetime; naive values are taken as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def resolve_since(
    adapter: GitPlatformAdapter,
    owner: str,
    repo: str,
    since: str | datetime | None = None,
) -> datetime:
    """Lower bound of the changelog: explicit `since`, else the latest release date.

    Raises:
        GitPlatformError: The query fails or the repository has no release.
    """
    if since is not None:
        return parse_since(since)
    released = adapter.get_latest_release_date(owner, repo)
    if released is None:
        raise GitPlatformError(f"{owner}/{repo} has no release; pass --since explicitly")
    LOG.info("Latest release of %s/%s: %s", owner, repo, released.isoformat())
    return released


def fetch_commits(
    adapter: GitPlatformAdapter,
    owner: str,
    repo: str,
    since: datetime,
    *,
    until: datetime | None = None,
    branch: str = "main",
    page_size: int = PAGE_SIZE,
) -> List[Commit]:
    """Return every parseable commit on `branch` authored in (since, until].

    Entries that can't be parsed are skipped. A failed page query ends the
    walk and the commits gathered so far are returned.

    Raises:
        HistoryBoundaryError: The window can't be moved one second back.
        MalformedHistoryError: An entry has an empty commit message.
    """
    window_end = parse_since(until) if until is not None else datetime.now(UTC)
    commits: List[Commit] = []
    pages = 0
    dropped = 0

    while True:
        try:
            raw = adapter.fetch_history_page(
                owner,
                repo,
                since=since,
                until=window_end,
                branch=branch,
                first=page_size,
            )
        except GitPlatformError as e:
            LOG.warning(
                "History page until %s failed, keeping %d commits from %d pages: %s",
                window_end.isoformat(),
                len(commits),
                pages,
                e,
            )
            break
        if not raw:
            break
        pages += 1

        for node in raw:
            try:
                commits.append(parse_commit(node))
            except CommitParseError as e:
                dropped += 1
                LOG.debug("Skipping history entry: %s", e)

        try:
            oldest = parse_authored_date((raw[-1] or {}).get("authoredDate"))
        except (CommitParseError, AttributeError) as e:
            LOG.warning("Can't read date of oldest entry on page %d, stopping: %s", pages, e)
            break
        new_end = next_until(oldest)
        if new_end >= window_end:
            LOG.warning(
                "History window did not move back (%s >= %s), stopping",
                new_end.isoformat(),
                window_end.isoformat(),
            )
            break
        window_end = new_end

    LOG.debug("History: %d pages, %d commits, %d entries skipped", pages, len(commits), dropped)
    if dropped:
        LOG.info("Skipped %d unparseable history entries", dropped)
    return commits


def filter_user_commits(commits: Iterable[Commit], ignored_authors: Iterable[str]) -> List[Commit]:
    """Drop commits whose author login contains any of `ignored_authors` (e.g. bots)."""
    patterns = [p for p in ignored_authors if p]
    return [c for c in commits if not any(p in c.author for p in patterns)]
