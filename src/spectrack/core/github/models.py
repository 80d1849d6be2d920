"""
GitHub data models for spectrack.

Defines the RepoInfo model used to build pull request links.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, computed_field


class RepoInfo(BaseModel):
    """
    GitHub repository information.

    Parsed from an ``owner/repo`` slug or a git remote URL (SSH or HTTPS).

    Example:
        >>> RepoInfo.parse("git@github.com:user/repo.git")
        RepoInfo(owner='user', repo='repo', full_name='user/repo', url='https://github.com/user/repo')
        >>> RepoInfo.parse("user/repo").pull_request_url(42)
        'https://github.com/user/repo/pull/42'
    """

    owner: str = Field(..., description="Repository owner (user or organization)")
    repo: str = Field(..., description="Repository name")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        """GitHub URL for the repository."""
        return f"https://github.com/{self.owner}/{self.repo}"

    def pull_request_url(self, number: int) -> str:
        """Get URL for a specific pull request."""
        return f"{self.url}/pull/{number}"

    @classmethod
    def from_remote_url(cls, remote_url: str) -> RepoInfo | None:
        """
        Parse repository info from a git remote URL.

        Handles formats:
        - git@github.com:user/repo.git
        - git@github.com:user/repo
        - https://github.com/user/repo.git
        - https://github.com/user/repo

        Returns:
            RepoInfo or None if not a valid GitHub URL
        """
        if not remote_url:
            return None

        ssh_match = re.match(r"git@github\.com:([^/]+)/([^/]+?)(?:\.git)?$", remote_url)
        if ssh_match:
            return cls(owner=ssh_match.group(1), repo=ssh_match.group(2))

        https_match = re.match(r"https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$", remote_url)
        if https_match:
            return cls(owner=https_match.group(1), repo=https_match.group(2))

        return None

    @classmethod
    def parse(cls, value: str) -> RepoInfo | None:
        """Parse an ``owner/repo`` slug or any remote URL from_remote_url accepts."""
        value = value.strip()
        slug_match = re.match(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$", value)
        if slug_match:
            return cls(owner=slug_match.group(1), repo=slug_match.group(2))
        return cls.from_remote_url(value)
