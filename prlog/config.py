"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from prlog.models import DEFAULT_LABEL_KINDS, PRKind


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so secret resolution can read env/file
_current_env: dict[str, str] = {}


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL (GraphQL at /graphql)")
    web_url: str = Field(default="https://github.com", description="Base URL for pull request links")
    timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")


class RepositoryConfig(BaseSettings):
    """Repository the changelog is generated for."""

    model_config = SettingsConfigDict(env_prefix="REPOSITORY_", extra="ignore")

    owner: str | None = Field(default=None, description="Repository owner, e.g. boa-dev")
    name: str | None = Field(default=None, description="Repository name, e.g. boa")
    branch: str = Field(default="main", description="Mainline branch to walk")


class ChangelogConfig(BaseSettings):
    """Classification and paging settings."""

    model_config = SettingsConfigDict(env_prefix="CHANGELOG_", extra="ignore")

    since: datetime | None = Field(
        default=None,
        description="ISO-8601 lower bound; default is the latest release's tag commit date",
    )
    labels: dict[str, PRKind] = Field(
        default_factory=lambda: dict(DEFAULT_LABEL_KINDS),
        description="Label name -> feature | bug_fix | internal | ignored",
    )
    ignored_authors: list[str] = Field(
        default_factory=lambda: ["dependabot"],
        description="Drop commits whose author login contains any of these",
    )
    page_size: int = Field(default=100, ge=1, le=100, description="History entries per query")
    label_limit: int = Field(default=10, ge=1, le=100, description="Labels read per pull request")
    # None: one concurrent lookup per commit
    max_workers: int | None = Field(default=16, ge=1, description="Concurrent label lookups")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = (self.github.token or "").strip()
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("prlog.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    github = GitHubConfig(**(raw.get("github") or {}))
    repository = RepositoryConfig(**(raw.get("repository") or {}))
    changelog = ChangelogConfig(**(raw.get("changelog") or {}))
    logging = LoggingConfig(**(raw.get("logging") or {}))

    return AppConfig(
        github=github,
        repository=repository,
        changelog=changelog,
        logging=logging,
    )
