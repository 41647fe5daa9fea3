"""Resolve commits to pull request categories through their labels."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Iterator, Mapping, Sequence

from prlog.adapters.base import GitPlatformAdapter, GitPlatformError
from prlog.models import DEFAULT_LABEL_KINDS, PR, Commit, PRKind

LOG = logging.getLogger("prlog.classifier")

LABEL_LIMIT = 10


def classify_labels(labels: Iterable[str], label_kinds: Mapping[str, PRKind] = DEFAULT_LABEL_KINDS) -> PRKind:
    """Return the kind of the first label present in `label_kinds`.

    Labels are checked in the order given (the platform's order), not by
    any priority of the kinds. No match means IGNORED.
    """
    for label in labels:
        kind = label_kinds.get(label)
        if kind is not None:
            return kind
    return PRKind.IGNORED


def classify_commit(
    adapter: GitPlatformAdapter,
    owner: str,
    repo: str,
    commit: Commit,
    label_kinds: Mapping[str, PRKind] = DEFAULT_LABEL_KINDS,
    label_limit: int = LABEL_LIMIT,
) -> PR:
    """Look up the labels of the commit's pull request and classify it.

    Raises:
        GitPlatformError: Labels could not be fetched.
    """
    labels = adapter.get_pull_request_labels(owner, repo, commit.number, first=label_limit)
    return PR(commit=commit, kind=classify_labels(labels, label_kinds))


class ClassificationRun:
    """Concurrent classification of many commits.

    Iterating yields PRs in completion order. Commits whose lookup fails
    are dropped; `failed` counts them once iteration is finished.
    """

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        owner: str,
        repo: str,
        commits: Sequence[Commit],
        label_kinds: Mapping[str, PRKind] = DEFAULT_LABEL_KINDS,
        label_limit: int = LABEL_LIMIT,
        max_workers: int | None = None,
    ) -> None:
        self.adapter = adapter
        self.owner = owner
        self.repo = repo
        self.commits = list(commits)
        self.label_kinds = dict(label_kinds)
        self.label_limit = label_limit
        # None: one worker per commit
        self.max_workers = max_workers
        self.failed = 0

    def _workers(self) -> int:
        if self.max_workers is None:
            return max(1, len(self.commits))
        return max(1, min(self.max_workers, len(self.commits)))

    def __iter__(self) -> Iterator[PR]:
        if not self.commits:
            return
        with ThreadPoolExecutor(max_workers=self._workers(), thread_name_prefix="prlog-labels") as ex:
            futs = {
                ex.submit(
                    classify_commit,
                    self.adapter,
                    self.owner,
                    self.repo,
                    commit,
                    self.label_kinds,
                    self.label_limit,
                ): commit
                for commit in self.commits
            }
            for fut in as_completed(futs):
                commit = futs[fut]
                try:
                    pr = fut.result()
                except GitPlatformError as e:
                    self.failed += 1
                    LOG.debug("Classification failed for #%s: %s", commit.pr_number, e)
                    continue
                yield pr
        if self.failed:
            LOG.warning("Could not classify %d of %d commits", self.failed, len(self.commits))


def classify_commits(
    adapter: GitPlatformAdapter,
    owner: str,
    repo: str,
    commits: Sequence[Commit],
    *,
    label_kinds: Mapping[str, PRKind] = DEFAULT_LABEL_KINDS,
    label_limit: int = LABEL_LIMIT,
    max_workers: int | None = None,
) -> Iterator[PR]:
    """Classify `commits` concurrently; yield PRs as their lookups complete."""
    return iter(
        ClassificationRun(
            adapter,
            owner,
            repo,
            commits,
            label_kinds=label_kinds,
            label_limit=label_limit,
            max_workers=max_workers,
        )
    )
