"""prlog entry point.

Prints a Markdown changelog of the pull requests merged into the mainline
branch since the latest release. Usage: prlog --owner OWNER --repo REPO.
"""

import argparse
import logging
import sys
from pathlib import Path

from prlog.adapters.base import GitPlatformError
from prlog.adapters.github import GitHubAdapter
from prlog.config import AppConfig, load_config
from prlog.logging import PrlogLogging
from prlog.services.changelog import render_changelog, render_ignored
from prlog.services.commit_parser import MalformedHistoryError
from prlog.services.history import HistoryBoundaryError, resolve_since
from prlog.services.pipeline import generate_changelog

LOG = logging.getLogger("prlog")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prlog",
        description="Generate a categorized changelog from pull request labels",
    )
    parser.add_argument("--owner", "-o", help="Repository owner (overrides repository.owner)")
    parser.add_argument("--repo", "-r", help="Repository name (overrides repository.name)")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("prlog.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--since",
        help="ISO-8601 lower bound (default: date of the latest release)",
    )
    parser.add_argument("--branch", "-b", help="Mainline branch (default: main)")
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Concurrent label lookups (0 = one per commit)",
    )
    parser.add_argument(
        "--list-ignored",
        action="store_true",
        help="Also list ignored pull requests on stderr",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser


def _apply_overrides(config: AppConfig, args: argparse.Namespace, parser: argparse.ArgumentParser) -> AppConfig:
    """Merge CLI flags into the loaded config; owner and repo are required."""
    repository = config.repository.model_copy(
        update={
            k: v
            for k, v in (("owner", args.owner), ("name", args.repo), ("branch", args.branch))
            if v
        }
    )
    changelog_update: dict = {}
    if args.since:
        changelog_update["since"] = args.since
    if args.max_workers is not None:
        if args.max_workers < 0:
            parser.error("--max-workers must be >= 0")
        changelog_update["max_workers"] = args.max_workers or None
    changelog = config.changelog.model_copy(update=changelog_update)

    if not repository.owner or not repository.name:
        parser.error("--owner and --repo are required (or repository.owner/name in the config)")
    return config.model_copy(update={"repository": repository, "changelog": changelog})


def main(argv: list[str] | None = None) -> int:
    """Entry point: generate the changelog and print it to stdout."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    config = load_config(args.config)
    PrlogLogging(config.logging).setup()
    config = _apply_overrides(config, args, parser)
    owner = config.repository.owner
    repo = config.repository.name

    if args.check:
        print("Config OK:", f"{owner}/{repo}@{config.repository.branch}")
        return 0

    token = config.github_token_resolved
    if not token:
        LOG.error("Missing GitHub token: set GITHUB_TOKEN or GITHUB_TOKEN_FILE")
        return 1

    adapter = GitHubAdapter(token=token, api_url=config.github.api_url, timeout=config.github.timeout)
    settings = config.changelog
    try:
        since = resolve_since(adapter, owner, repo, settings.since)
        changelog = generate_changelog(
            adapter,
            owner,
            repo,
            since,
            branch=config.repository.branch,
            label_kinds=settings.labels,
            label_limit=settings.label_limit,
            ignored_authors=settings.ignored_authors,
            max_workers=settings.max_workers,
            page_size=settings.page_size,
        )
    except KeyboardInterrupt:
        return 130
    except (GitPlatformError, MalformedHistoryError, HistoryBoundaryError, ValueError) as e:
        LOG.exception("Fatal error: %s", e)
        return 1

    sys.stdout.write(render_changelog(changelog, owner, repo, host=config.github.web_url))
    if args.list_ignored:
        sys.stderr.write(render_ignored(changelog))
    return 0


if __name__ == "__main__":
    sys.exit(main())
