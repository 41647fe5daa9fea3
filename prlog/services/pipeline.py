"""Changelog pipeline: history -> bot filter -> classification -> grouping."""

import logging
from datetime import datetime
from typing import Iterable, Mapping

from prlog.adapters.base import GitPlatformAdapter
from prlog.models import DEFAULT_LABEL_KINDS, PRKind
from prlog.services.changelog import Changelog, build_changelog, log_counts
from prlog.services.classifier import LABEL_LIMIT, ClassificationRun
from prlog.services.history import PAGE_SIZE, fetch_commits, filter_user_commits

LOG = logging.getLogger("prlog.pipeline")


def generate_changelog(
    adapter: GitPlatformAdapter,
    owner: str,
    repo: str,
    since: datetime,
    *,
    until: datetime | None = None,
    branch: str = "main",
    label_kinds: Mapping[str, PRKind] = DEFAULT_LABEL_KINDS,
    label_limit: int = LABEL_LIMIT,
    ignored_authors: Iterable[str] = ("dependabot",),
    max_workers: int | None = None,
    page_size: int = PAGE_SIZE,
) -> Changelog:
    """Fetch, filter, classify and group every commit since `since`."""
    LOG.info("Fetching all commits on %s/%s@%s since %s", owner, repo, branch, since.isoformat())
    commits = fetch_commits(
        adapter,
        owner,
        repo,
        since,
        until=until,
        branch=branch,
        page_size=page_size,
    )
    LOG.info("commits:      %3d", len(commits))

    user_commits = filter_user_commits(commits, ignored_authors)
    LOG.info("user commits: %3d", len(user_commits))

    run = ClassificationRun(
        adapter,
        owner,
        repo,
        user_commits,
        label_kinds=label_kinds,
        label_limit=label_limit,
        max_workers=max_workers,
    )
    changelog = build_changelog(run)
    if run.failed:
        LOG.info("unresolved:   %3d", run.failed)
    log_counts(changelog)
    return changelog
