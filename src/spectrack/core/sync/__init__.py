"""
Spec → ClickUp synchronization.

Public API:
    - HierarchySyncEngine: find-or-create sync of one spec subtree
    - SyncReport, SyncAction, ActionKind: ordered record of a run
    - Status helpers: map_status, map_priority, is_downgrade,
      compute_promotion, plan_status_update
    - migrate_links, list_ready_items: link backfill and ready-item listing
"""

from spectrack.core.sync.engine import (
    HierarchySyncEngine,
    MissingParentContainerError,
    item_fields,
)
from spectrack.core.sync.migrate import (
    MigrationResult,
    ReadyItem,
    list_ready_items,
    migrate_links,
)
from spectrack.core.sync.models import ActionKind, SkippedSpec, SyncAction, SyncReport
from spectrack.core.sync.status import (
    RemoteStatus,
    StatusDecision,
    compute_promotion,
    is_downgrade,
    map_priority,
    map_status,
    plan_status_update,
    status_ordinal,
)

__all__ = [
    # Engine
    "HierarchySyncEngine",
    "MissingParentContainerError",
    "item_fields",
    # Models
    "ActionKind",
    "SkippedSpec",
    "SyncAction",
    "SyncReport",
    # Status
    "RemoteStatus",
    "StatusDecision",
    "compute_promotion",
    "is_downgrade",
    "map_priority",
    "map_status",
    "plan_status_update",
    "status_ordinal",
    # Migration
    "MigrationResult",
    "ReadyItem",
    "list_ready_items",
    "migrate_links",
]
