"""Changelog services: commit parsing, history walk, classification, rendering."""

from prlog.services.changelog import (
    Changelog,
    build_changelog,
    format_entry,
    render_changelog,
    render_ignored,
)
from prlog.services.classifier import classify_commit, classify_commits, classify_labels
from prlog.services.commit_parser import CommitParseError, MalformedHistoryError, parse_commit
from prlog.services.history import (
    HistoryBoundaryError,
    fetch_commits,
    filter_user_commits,
    resolve_since,
)
from prlog.services.pipeline import generate_changelog

__all__ = [
    "Changelog",
    "build_changelog",
    "format_entry",
    "render_changelog",
    "render_ignored",
    "classify_commit",
    "classify_commits",
    "classify_labels",
    "CommitParseError",
    "MalformedHistoryError",
    "parse_commit",
    "HistoryBoundaryError",
    "fetch_commits",
    "filter_user_commits",
    "resolve_since",
    "generate_changelog",
]
