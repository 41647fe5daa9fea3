"""Build Commit records from raw GitHub history nodes.

A history node looks like::

    {
        "author": {"user": {"login": "alice"}},
        "message": "Fix bug (#42)\\n\\nLonger description",
        "authoredDate": "2023-01-01T00:00:00Z",
    }

Only the first message line is used. It must end with the pull request
reference GitHub adds on squash merge, e.g. ``Fix bug (#42)``; commits
without one cannot be attributed to a pull request and are rejected.
"""

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from prlog.models import Commit

PR_REF_OPEN = " (#"
PR_REF_CLOSE = ")"


class CommitParseError(ValueError):
    """History entry cannot be turned into a Commit; the entry is skipped."""


class MalformedHistoryError(RuntimeError):
    """History entry violates a platform guarantee (e.g. empty commit message)."""


def parse_authored_date(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp; it must carry an offset."""
    if not isinstance(value, str):
        raise CommitParseError(f"authoredDate is not a string: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise CommitParseError(f"authoredDate is not RFC 3339: {value!r}") from e
    if parsed.tzinfo is None:
        raise CommitParseError(f"authoredDate has no offset: {value!r}")
    return parsed


def split_pr_reference(first_line: str) -> tuple[str, str]:
    """Split ``"<message> (#<n>)"`` into (message, n).

    The last ``" (#"`` on the line is used, so a reverted title that itself
    quotes a reference keeps the outer pull request number. When the last
    one is unterminated or not numeric, earlier ones are tried in turn.

    Raises:
        CommitParseError: No reference, or the number is not all digits.
    """
    idx = first_line.rfind(PR_REF_OPEN)
    if idx < 0:
        raise CommitParseError(f"No pull request reference in {first_line!r}")
    error: CommitParseError | None = None
    while idx >= 0:
        rest = first_line[idx + len(PR_REF_OPEN) :]
        end = rest.find(PR_REF_CLOSE)
        number = rest[:end] if end >= 0 else ""
        if number and number.isascii() and number.isdigit():
            return first_line[:idx].strip(), number
        if error is None:
            if end < 0:
                error = CommitParseError(f"Unterminated pull request reference in {first_line!r}")
            else:
                error = CommitParseError(f"Pull request number is not numeric: {number!r}")
        idx = first_line.rfind(PR_REF_OPEN, 0, idx)
    raise error


def parse_commit(node: Any) -> Commit:
    """Build a Commit from one history node.

    Raises:
        CommitParseError: Recoverable; the caller drops this entry.
        MalformedHistoryError: The commit message is empty.
    """
    if not isinstance(node, dict):
        raise CommitParseError("History entry is not an object")

    git_author = node.get("author")
    user = git_author.get("user") if isinstance(git_author, dict) else None
    author = user.get("login") if isinstance(user, dict) else None
    if not isinstance(author, str):
        raise CommitParseError("History entry has no author login")

    message = node.get("message")
    if not isinstance(message, str):
        raise CommitParseError("History entry has no message")
    if not message:
        raise MalformedHistoryError("Commit message can't be empty")
    # Only \n and \r\n end the title; other Unicode breaks are part of it
    first_line = message.split("\n", 1)[0].removesuffix("\r")
    title, pr_number = split_pr_reference(first_line)

    date = parse_authored_date(node.get("authoredDate"))

    try:
        return Commit(author=author, message=title, pr_number=pr_number, date=date)
    except ValidationError as e:
        raise CommitParseError(str(e)) from e
