"""
Git worktree manager implementation.

This module provides the WorktreeManager class for creating and listing
git worktrees, one per ClickUp item being developed.
"""

import builtins
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

DEFAULT_WORKTREE_DIR = "worktrees"


class WorktreeError(Exception):
    """Base exception for worktree operations."""

    pass


@dataclass
class Worktree:
    """
    Represents a git worktree.

    Attributes:
        path: Absolute path to the worktree directory
        branch: Branch name (None for detached HEAD)
        commit: Commit SHA
        is_bare: Whether this is the bare repository
        is_locked: Whether the worktree is locked
    """

    path: Path
    branch: str | None
    commit: str
    is_bare: bool = False
    is_locked: bool = False


class WorktreeProvider(Protocol):
    """What item workflows need from a worktree implementation."""

    def create(self, branch: str, base_dir: Path | None = None) -> Worktree: ...

    def find_for_branch(self, branch: str) -> Worktree | None: ...


def sanitize_branch_name(name: str) -> str:
    """
    Turn an item name into a branch name.

    Every run of characters other than ASCII letters and digits becomes a
    single dash; leading and trailing dashes are dropped.

    Example:
        >>> sanitize_branch_name("E02-F01-T01: Build the parser!")
        'E02-F01-T01-Build-the-parser'
    """
    return re.sub(r"[^a-zA-Z0-9]+", "-", name).strip("-")


class WorktreeManager:
    """
    Manages git worktrees through GitPython.

    Worktrees are created under ``<repo>/worktrees/<branch>`` unless a
    different base directory is given.

    Example:
        >>> manager = WorktreeManager()
        >>> worktree = manager.create("E02-F01-T01-Build-the-parser")
        >>> print(f"Created worktree at: {worktree.path}")
    """

    def __init__(self, repo_path: Path | None = None, base_dir: Path | None = None):
        """
        Initialize the worktree manager.

        Args:
            repo_path: Path to git repository (defaults to current directory)
            base_dir: Directory that holds worktrees; relative paths are
                resolved against the repository root

        Raises:
            WorktreeError: If not in a git repository
        """
        self.repo_path = repo_path or Path.cwd()

        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise WorktreeError(f"Not a git repository: {self.repo_path}") from e

        self.root = Path(self.repo.working_dir)
        self.worktree_base = self._resolve_base(base_dir)

    def _resolve_base(self, base_dir: Path | None) -> Path:
        if base_dir is None:
            return self.root / DEFAULT_WORKTREE_DIR
        base_dir = Path(base_dir).expanduser()
        return base_dir if base_dir.is_absolute() else self.root / base_dir

    def branch_exists(self, branch: str) -> bool:
        return any(head.name == branch for head in self.repo.heads)

    def create(self, branch: str, base_dir: Path | None = None) -> Worktree:
        """
        Create a worktree checked out on ``branch``.

        The branch is created from HEAD when it does not exist yet.

        Args:
            branch: Branch name, also used as the worktree directory name
            base_dir: Optional override of the worktree base directory

        Returns:
            Worktree object representing the created worktree

        Raises:
            WorktreeError: If the directory exists or git fails
        """
        if not branch:
            raise WorktreeError("Branch name must not be empty")

        base = self._resolve_base(base_dir) if base_dir is not None else self.worktree_base
        worktree_path = base / branch

        if worktree_path.exists():
            raise WorktreeError(f"Worktree already exists at: {worktree_path}")

        base.mkdir(parents=True, exist_ok=True)

        try:
            # git worktree add [-b <new-branch>] <path> [<branch>]
            cmd = ["git", "worktree", "add"]
            if self.branch_exists(branch):
                cmd.extend([str(worktree_path), branch])
            else:
                cmd.extend(["-b", branch, str(worktree_path)])

            self.repo.git.execute(cmd)

            worktree_repo = Repo(worktree_path)
            commit_sha = worktree_repo.head.commit.hexsha

            return Worktree(path=worktree_path, branch=branch, commit=commit_sha)

        except GitCommandError as e:
            raise WorktreeError(f"Failed to create worktree: {e.stderr}") from e

    def list(self) -> builtins.list[Worktree]:
        """
        List all worktrees in the repository.

        Raises:
            WorktreeError: If listing worktrees fails
        """
        try:
            output = self.repo.git.worktree("list", "--porcelain")
        except GitCommandError as e:
            raise WorktreeError(f"Failed to list worktrees: {e.stderr}") from e

        worktrees: builtins.list[Worktree] = []
        current: dict[str, str | bool] = {}

        for line in output.splitlines():
            line = line.strip()
            if not line:
                # Empty line ends an entry
                if current:
                    worktrees.append(self._parse_worktree(current))
                    current = {}
                continue

            if line.startswith("worktree "):
                current["path"] = line[len("worktree ") :]
            elif line.startswith("HEAD "):
                current["commit"] = line[len("HEAD ") :]
            elif line.startswith("branch "):
                current["branch"] = line[len("branch ") :].removeprefix("refs/heads/")
            elif line == "bare":
                current["is_bare"] = True
            elif line.startswith("locked"):
                current["is_locked"] = True

        if current:
            worktrees.append(self._parse_worktree(current))

        return worktrees

    def find_for_branch(self, branch: str) -> Worktree | None:
        """Existing worktree checked out on ``branch``, if any."""
        return next((w for w in self.list() if w.branch == branch), None)

    def _parse_worktree(self, data: dict[str, str | bool]) -> Worktree:
        """Parse worktree data dict into Worktree object."""
        return Worktree(
            path=Path(str(data.get("path", ""))),
            branch=str(data["branch"]) if "branch" in data else None,
            commit=str(data.get("commit", "")),
            is_bare=bool(data.get("is_bare", False)),
            is_locked=bool(data.get("is_locked", False)),
        )
