"""prlog: categorized changelogs from GitHub pull request labels."""

__version__ = "0.1.0"
