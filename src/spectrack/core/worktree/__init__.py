"""
Git worktree management for per-item development.

Example:
    >>> from spectrack.core.worktree import WorktreeManager, sanitize_branch_name
    >>> manager = WorktreeManager()
    >>> worktree = manager.create(sanitize_branch_name("E02-F01-T01: Parser"))
    >>> print(f"Item worktree: {worktree.path}")
"""

from .manager import (
    DEFAULT_WORKTREE_DIR,
    Worktree,
    WorktreeError,
    WorktreeManager,
    WorktreeProvider,
    sanitize_branch_name,
)

__all__ = [
    "DEFAULT_WORKTREE_DIR",
    "WorktreeManager",
    "WorktreeProvider",
    "Worktree",
    "WorktreeError",
    "sanitize_branch_name",
]
