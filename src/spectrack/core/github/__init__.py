"""GitHub repository helpers used to build pull request links."""

from spectrack.core.github.models import RepoInfo

__all__ = ["RepoInfo"]
