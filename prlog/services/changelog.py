"""Group classified pull requests and render them as Markdown."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from prlog.models import PR, Commit, PRKind

LOG = logging.getLogger("prlog.changelog")

DEFAULT_HOST = "https://github.com"

SECTION_TITLES = (
    ("features", "Feature Enhancements"),
    ("fixes", "Bug Fixes"),
    ("improvements", "Internal Improvements"),
)


@dataclass
class Changelog:
    """Classified pull requests by category.

    features, fixes and improvements are ordered by commit date; ignored
    keeps arrival order and is only used for diagnostics.
    """

    features: List[PR] = field(default_factory=list)
    fixes: List[PR] = field(default_factory=list)
    improvements: List[PR] = field(default_factory=list)
    ignored: List[PR] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "features": len(self.features),
            "fixes": len(self.fixes),
            "improvements": len(self.improvements),
            "ignored": len(self.ignored),
        }


def _by_date(prs: List[PR]) -> List[PR]:
    # sorted() is stable: equal dates keep arrival order
    return sorted(prs, key=lambda pr: pr.commit.date)


def build_changelog(prs: Iterable[PR]) -> Changelog:
    """Partition PRs (in any arrival order) by kind and sort the rendered groups."""
    buckets: dict[PRKind, List[PR]] = {kind: [] for kind in PRKind}
    for pr in prs:
        buckets[pr.kind].append(pr)
    return Changelog(
        features=_by_date(buckets[PRKind.FEATURE]),
        fixes=_by_date(buckets[PRKind.BUG_FIX]),
        improvements=_by_date(buckets[PRKind.INTERNAL]),
        ignored=buckets[PRKind.IGNORED],
    )


def format_entry(commit: Commit, owner: str, repo: str, host: str = DEFAULT_HOST) -> str:
    """One changelog line, e.g. ``Fix bug by @alice in [#42](https://github.com/o/r/pull/42)``."""
    n = commit.pr_number
    url = f"{host.rstrip('/')}/{owner}/{repo}/pull/{n}"
    return f"{commit.message} by @{commit.author} in [#{n}]({url})"


def render_changelog(changelog: Changelog, owner: str, repo: str, host: str = DEFAULT_HOST) -> str:
    """Render the three public sections as Markdown.

    Each section is a ``###`` heading, a blank line and one bullet per
    pull request; sections are separated by a blank line. Ignored pull
    requests are not rendered.
    """
    sections: List[str] = []
    for attr, title in SECTION_TITLES:
        lines = [f"### {title}", ""]
        lines.extend(f"- {format_entry(pr.commit, owner, repo, host)}" for pr in getattr(changelog, attr))
        sections.append("\n".join(lines))
    return "\n\n".join(sections) + "\n"


def render_ignored(changelog: Changelog) -> str:
    """Diagnostic listing of ignored pull requests."""
    lines = ["-- ignored commits --"]
    for pr in changelog.ignored:
        c = pr.commit
        lines.append(f"#{c.pr_number} @{c.author}: {c.message}")
    return "\n".join(lines) + "\n"


def log_counts(changelog: Changelog) -> None:
    """Log the size of every group."""
    for name, count in changelog.counts().items():
        LOG.info("%-13s %3d", f"{name}:", count)
