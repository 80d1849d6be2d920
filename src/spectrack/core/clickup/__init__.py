"""
ClickUp API v2 integration.

Public API:
    - ClickUpClient: rate-limited httpx client
    - RateLimiter: minimum-spacing gate shared by every call of a client
    - resolve_space: pick the team and space to sync into
    - link_pull_request, start_item: single-item workflows
    - Models: Team, Space, Folder, TaskList, Item, CustomField
    - Exceptions: ClickUpError and subclasses
"""

from spectrack.core.clickup.actions import (
    LinkPullRequestResult,
    StartItemResult,
    link_pull_request,
    start_item,
)
from spectrack.core.clickup.client import (
    BASE_URL,
    DEFAULT_INTERVAL,
    STATUS_INTERVAL,
    ClickUpClient,
)
from spectrack.core.clickup.exceptions import (
    ClickUpError,
    CustomFieldNotFoundError,
    RemoteThrottledError,
    RemoteTransportError,
    WorkspaceNotFoundError,
)
from spectrack.core.clickup.models import CustomField, Folder, Item, Space, TaskList, Team
from spectrack.core.clickup.ratelimit import RateLimiter
from spectrack.core.clickup.workspace import resolve_space, resolve_team

__all__ = [
    # Client
    "BASE_URL",
    "DEFAULT_INTERVAL",
    "STATUS_INTERVAL",
    "ClickUpClient",
    "RateLimiter",
    # Workspace
    "resolve_space",
    "resolve_team",
    # Actions
    "LinkPullRequestResult",
    "StartItemResult",
    "link_pull_request",
    "start_item",
    # Models
    "CustomField",
    "Folder",
    "Item",
    "Space",
    "TaskList",
    "Team",
    # Exceptions
    "ClickUpError",
    "CustomFieldNotFoundError",
    "RemoteThrottledError",
    "RemoteTransportError",
    "WorkspaceNotFoundError",
]
