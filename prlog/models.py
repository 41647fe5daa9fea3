"""Data models for commits and classified pull requests (Pydantic)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class PRKind(str, Enum):
    """Changelog category of a pull request."""

    FEATURE = "feature"
    BUG_FIX = "bug_fix"
    INTERNAL = "internal"
    IGNORED = "ignored"


# Label name (as shown on GitHub, case-sensitive) -> category
DEFAULT_LABEL_KINDS: dict[str, PRKind] = {
    "enhancement": PRKind.FEATURE,
    "bug": PRKind.BUG_FIX,
    "Internal": PRKind.INTERNAL,
}


class Commit(BaseModel):
    """Commit on the mainline branch, attributed to a pull request."""

    author: str = Field(..., description="Login of the commit author's account")
    message: str = Field(..., description="First message line without the (#N) suffix")
    pr_number: str = Field(..., pattern=r"^[0-9]+$", description="Pull request number")
    date: datetime = Field(..., description="Authored date, offset-aware")

    model_config = {"frozen": True}

    @field_validator("date")
    @classmethod
    def _require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("authored date must carry a UTC offset")
        return value

    @property
    def number(self) -> int:
        """Pull request number as int (for query variables)."""
        return int(self.pr_number)


class PR(BaseModel):
    """Pull request classification: a commit and the category it landed in."""

    commit: Commit
    kind: PRKind

    model_config = {"frozen": True}

    def __lt__(self, other: "PR") -> bool:
        return self.commit.date < other.commit.date
