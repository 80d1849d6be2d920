"""
Status reconciliation between spec documents and ClickUp.

Spec headers use a loose vocabulary (``in-progress``, ``completed``,
``abandoned``...). ClickUp uses the upper-case workflow below, ordered
from least to most advanced:

    DRAFT(1) → PLANNED(2) → BLOCKED(3) → IN PROGRESS(4) → REVIEW(5)
    → TESTING(6) → COMPLETE(7)

CANCELLED sits outside the order: moving into or out of it is always
allowed. Any other remote status (custom tracker states) has ordinal 0.

A sync never moves an item to a lower ordinal than it already has, so a
stale spec cannot undo progress recorded in ClickUp.
"""

from enum import Enum


class RemoteStatus(str, Enum):
    """ClickUp workflow statuses."""

    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    BLOCKED = "BLOCKED"
    IN_PROGRESS = "IN PROGRESS"
    REVIEW = "REVIEW"
    TESTING = "TESTING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"


STATUS_ORDER: dict[str, int] = {
    RemoteStatus.DRAFT.value: 1,
    RemoteStatus.PLANNED.value: 2,
    RemoteStatus.BLOCKED.value: 3,
    RemoteStatus.IN_PROGRESS.value: 4,
    RemoteStatus.REVIEW.value: 5,
    RemoteStatus.TESTING.value: 6,
    RemoteStatus.COMPLETE.value: 7,
}

_SOURCE_STATUS_MAP: dict[str, RemoteStatus] = {
    "draft": RemoteStatus.DRAFT,
    "planned": RemoteStatus.PLANNED,
    "in-progress": RemoteStatus.IN_PROGRESS,
    "in_progress": RemoteStatus.IN_PROGRESS,
    "completed": RemoteStatus.COMPLETE,
    "complete": RemoteStatus.COMPLETE,
    "blocked": RemoteStatus.BLOCKED,
    "review": RemoteStatus.REVIEW,
    "testing": RemoteStatus.TESTING,
    "cancelled": RemoteStatus.CANCELLED,
    "canceled": RemoteStatus.CANCELLED,
    "abandoned": RemoteStatus.CANCELLED,
}

# ClickUp priorities: 1 urgent, 2 high, 3 normal, 4 low
_PRIORITY_MAP: dict[str, int] = {
    "urgent": 1,
    "critical": 1,
    "high": 2,
    "normal": 3,
    "medium": 3,
    "low": 4,
}
DEFAULT_PRIORITY = 3


class StatusDecision(str, Enum):
    """Outcome of comparing a remote status with a target status."""

    UNCHANGED = "unchanged"
    SKIP_DOWNGRADE = "skip_downgrade"
    UPDATE = "update"


def normalize_status(status: str | None) -> str:
    """Upper-case and trim a status for comparison."""
    return (status or "").strip().upper()


def map_status(source_status: str | None) -> RemoteStatus:
    """
    Map a spec header status to a ClickUp status.

    Examples:
        >>> map_status("In-Progress")
        <RemoteStatus.IN_PROGRESS: 'IN PROGRESS'>
        >>> map_status("someday")
        <RemoteStatus.DRAFT: 'DRAFT'>
    """
    key = (source_status or "").strip().lower()
    return _SOURCE_STATUS_MAP.get(key, RemoteStatus.DRAFT)


def map_priority(source_priority: str | None) -> int:
    """Map a spec header priority to a ClickUp priority number (default 3)."""
    key = (source_priority or "").strip().lower()
    return _PRIORITY_MAP.get(key, DEFAULT_PRIORITY)


def status_ordinal(status: str | None) -> int:
    """Position in the workflow; 0 for CANCELLED and unknown statuses."""
    return STATUS_ORDER.get(normalize_status(status), 0)


def is_downgrade(current: str | None, target: str | None) -> bool:
    """
    Check if moving from ``current`` to ``target`` would regress an item.

    Transitions into or out of CANCELLED are never downgrades.

    Examples:
        >>> is_downgrade("COMPLETE", "PLANNED")
        True
        >>> is_downgrade("COMPLETE", "CANCELLED")
        False
        >>> is_downgrade("CANCELLED", "DRAFT")
        False
    """
    cancelled = RemoteStatus.CANCELLED.value
    if normalize_status(current) == cancelled or normalize_status(target) == cancelled:
        return False
    return status_ordinal(current) > status_ordinal(target)


def compute_promotion(target: str, child_statuses: list[str]) -> str:
    """
    Promote a parent to COMPLETE once every child is COMPLETE.

    Promotion only ever raises the target. A parent without children keeps
    its own target.

    Args:
        target: The parent's mapped status
        child_statuses: Mapped statuses of the parent's children

    Returns:
        COMPLETE if promotion applies, otherwise ``target`` unchanged
    """
    complete = RemoteStatus.COMPLETE.value
    if not child_statuses:
        return target
    if normalize_status(target) == complete:
        return target
    if all(normalize_status(s) == complete for s in child_statuses):
        return complete
    return target


def plan_status_update(current: str | None, target: str) -> StatusDecision:
    """
    Decide what to do with an item's status.

    Returns:
        UNCHANGED when statuses match (case-insensitively), SKIP_DOWNGRADE
        when the move would regress the item, otherwise UPDATE
    """
    if normalize_status(current) == normalize_status(target):
        return StatusDecision.UNCHANGED
    if is_downgrade(current, target):
        return StatusDecision.SKIP_DOWNGRADE
    return StatusDecision.UPDATE
