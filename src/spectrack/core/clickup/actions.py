"""
Single-item workflows that bypass the hierarchy sync.

- link_pull_request: record a PR link on an item and mark it COMPLETE
- start_item: create a worktree for an item and move it to IN PROGRESS
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from spectrack.core.clickup.client import ClickUpClient
from spectrack.core.clickup.exceptions import ClickUpError
from spectrack.core.clickup.models import Item
from spectrack.core.github import RepoInfo
from spectrack.core.sync.status import RemoteStatus, StatusDecision, plan_status_update
from spectrack.core.worktree import Worktree, WorktreeProvider, sanitize_branch_name

logger = logging.getLogger(__name__)

DEFAULT_PR_FIELD = "Pull Request"


@dataclass
class LinkPullRequestResult:
    """Outcome of link_pull_request."""

    item: Item
    pr_url: str
    status_decision: StatusDecision


@dataclass
class StartItemResult:
    """Outcome of start_item."""

    item: Item
    worktree: Worktree
    created_worktree: bool
    status_decision: StatusDecision


def _move_status(client: ClickUpClient, item: Item, target: RemoteStatus) -> StatusDecision:
    decision = plan_status_update(item.status, target.value)
    if decision == StatusDecision.UPDATE:
        client.update_item(item.id, {"status": target.value})
        logger.info(f"Item {item.id} status {item.status} → {target.value}")
    elif decision == StatusDecision.SKIP_DOWNGRADE:
        logger.info(f"Keeping item {item.id} at {item.status}, not moving back to {target.value}")
    return decision


def link_pull_request(
    client: ClickUpClient,
    item_id: str,
    pr_number: int,
    repo: RepoInfo,
    field_name: str = DEFAULT_PR_FIELD,
) -> LinkPullRequestResult:
    """
    Set an item's pull request field and mark it COMPLETE.

    Args:
        client: ClickUp client
        item_id: ClickUp item ID
        pr_number: Pull request number
        repo: Repository the pull request belongs to
        field_name: Name of the custom field that holds the link

    Raises:
        ClickUpError: If the item has no list
        CustomFieldNotFoundError: If the list lacks ``field_name``
    """
    item = client.get_item(item_id)
    if not item.list_id:
        raise ClickUpError(f"Cannot determine list for item {item_id}")

    field = client.find_custom_field(item.list_id, field_name)
    pr_url = repo.pull_request_url(pr_number)

    logger.info(f"Setting {field.name} ({field.id}) on {item.name} to {pr_url}")
    client.set_custom_field(item.id, field.id, pr_url)

    decision = _move_status(client, item, RemoteStatus.COMPLETE)
    return LinkPullRequestResult(item=item, pr_url=pr_url, status_decision=decision)


def start_item(
    client: ClickUpClient,
    item_id: str,
    worktrees: WorktreeProvider,
    base_dir: Path | None = None,
) -> StartItemResult:
    """
    Create a development worktree for an item and move it to IN PROGRESS.

    The branch name is the item name with every non-alphanumeric run turned
    into a dash. An existing worktree on that branch is reused. The status
    move is skipped when the item is already further along.

    Raises:
        WorktreeError: If the worktree cannot be created
    """
    item = client.get_item(item_id)
    branch = sanitize_branch_name(item.name)
    if not branch:
        raise ClickUpError(f"Item {item_id} has no usable name for a branch")

    worktree = worktrees.find_for_branch(branch)
    created = worktree is None
    if worktree is None:
        worktree = worktrees.create(branch, base_dir)
        logger.info(f"Created worktree {worktree.path} on {branch}")
    else:
        logger.info(f"Reusing worktree {worktree.path} on {branch}")

    decision = _move_status(client, item, RemoteStatus.IN_PROGRESS)
    return StartItemResult(
        item=item,
        worktree=worktree,
        created_worktree=created,
        status_decision=decision,
    )
