"""
Hierarchy sync engine: spec tree → ClickUp.

Walks the spec tree top-down from the requested ID and, at every level,
locates the matching ClickUp object or creates it, then recurses:

    Epic      → Folder   "{epicId} - {title}"        (exact name)
    Feature   → List     "{featureId}: {title}"      (exact name)
    Task      → Item     "{taskId}: {title}"         (spec ID field, then name prefix)
    Subtask   → Item     parent = task item
    Extension → Item     parent = task or subtask item

Existing items get their name reconciled, then their children synced, then
their status reconciled (promotion first, then the downgrade guard). New
items are created, parented, linked through their spec ID field, written
back into their spec file, and then their children are synced.

A dry run performs every read and records the same action sequence a live
run would, but never writes to ClickUp or to disk.
"""

import logging
from collections.abc import Callable
from datetime import datetime, time, timezone
from typing import Any, Protocol

from spectrack.core.clickup.exceptions import (
    ClickUpError,
    RemoteThrottledError,
    RemoteTransportError,
)
from spectrack.core.clickup.models import CustomField, Folder, Item, TaskList
from spectrack.core.ids import SpecLevel, get_parent_id, parse_spec_id
from spectrack.core.specs import (
    MissingSourceDocumentError,
    SpecNode,
    SpecTree,
    SpecWriter,
)
from spectrack.core.sync.models import ActionKind, SkippedSpec, SyncAction, SyncReport
from spectrack.core.sync.status import (
    StatusDecision,
    compute_promotion,
    map_priority,
    map_status,
    plan_status_update,
)

logger = logging.getLogger(__name__)

PENDING_PREFIX = "pending:"
CHILDREN_SOURCES = ("declared", "directory")

ActionCallback = Callable[[SyncAction], None]


class RemoteClient(Protocol):
    """Subset of ClickUpClient the engine relies on."""

    spec_id_field: str

    def find_folder(self, space_id: str, name: str) -> Folder | None: ...

    def create_folder(self, space_id: str, name: str) -> Folder: ...

    def find_list(self, folder_id: str, name: str) -> TaskList | None: ...

    def create_list(self, folder_id: str, name: str) -> TaskList: ...

    def find_item_by_spec_id(self, list_id: str, spec_id: str) -> Item | None: ...

    def create_item(self, list_id: str, fields: dict[str, Any]) -> Item: ...

    def update_item(self, item_id: str, fields: dict[str, Any]) -> Item: ...

    def list_custom_fields(self, list_id: str) -> list[CustomField]: ...

    def set_custom_field(self, item_id: str, field_id: str, value: Any) -> None: ...


class MissingParentContainerError(Exception):
    """Raised when a folder, list or parent item a subtree needs does not exist."""

    def __init__(self, spec_id: str, container: str, reason: str) -> None:
        super().__init__(f"{spec_id}: {container} unavailable ({reason})")
        self.spec_id = spec_id
        self.container = container
        self.reason = reason


def _start_date_ms(node: SpecNode) -> int | None:
    if node.created is None:
        return None
    start = datetime.combine(node.created, time.min, tzinfo=timezone.utc)
    return int(start.timestamp() * 1000)


def item_fields(node: SpecNode, status: str) -> dict[str, Any]:
    """Payload for creating the ClickUp item of ``node``."""
    fields: dict[str, Any] = {
        "name": node.item_name,
        "description": node.body,
        "status": status,
        "priority": map_priority(node.priority),
        "time_estimate": int(round(node.estimated_hours * 3_600_000)),
        "tags": list(node.tags),
    }
    start_date = _start_date_ms(node)
    if start_date is not None:
        fields["start_date"] = start_date
    return fields


class HierarchySyncEngine:
    """
    Synchronizes one subtree of a SpecTree into a ClickUp space.

    Example:
        >>> engine = HierarchySyncEngine(client, tree, space_id="901", dry_run=True)
        >>> report = engine.sync("E02")
        >>> for action in report.actions:
        ...     print(action.describe())
    """

    def __init__(
        self,
        client: RemoteClient,
        tree: SpecTree,
        space_id: str,
        dry_run: bool = False,
        writer: SpecWriter | None = None,
        children_source: str = "directory",
        on_action: ActionCallback | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            client: ClickUp client (shared, owns the rate limiter)
            tree: Loaded spec tree
            space_id: Space that holds the epic folders
            dry_run: Record actions without writing anything
            writer: Write-back target; defaults to the tree's root
            children_source: "directory" (default) syncs every child found on
                disk; "declared" uses a header's ``children`` list when present
                and the directory layout otherwise
            on_action: Called with every recorded action, in order

        Raises:
            ValueError: If children_source is not recognized
        """
        if children_source not in CHILDREN_SOURCES:
            raise ValueError(
                f"children_source must be one of {CHILDREN_SOURCES}, got {children_source!r}"
            )
        self.client = client
        self.tree = tree
        self.space_id = space_id
        self.dry_run = dry_run
        self.writer = writer or SpecWriter(tree.root, suffix=tree.suffix)
        self.children_source = children_source
        self.on_action = on_action
        self._report = SyncReport(root_id="", dry_run=dry_run)
        self._spec_field_ids: dict[str, str | None] = {}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def sync(self, spec_id: str) -> SyncReport:
        """
        Sync ``spec_id`` and everything below it.

        The ID's level decides where traversal starts. For features and
        deeper, the enclosing folder and list are located (or created) first;
        for subtasks and extensions the parent item must already exist.

        Raises:
            MalformedIdError: If ``spec_id`` is not a valid spec ID
            RemoteThrottledError: If ClickUp keeps throttling after a retry
            RemoteTransportError: On any other ClickUp failure
        """
        parts = parse_spec_id(spec_id)
        self._report = SyncReport(root_id=spec_id, dry_run=self.dry_run)
        self._spec_field_ids = {}

        mode = " [dry run]" if self.dry_run else ""
        logger.info(f"Syncing {spec_id} ({parts.level.value}){mode}")

        self._guarded(spec_id, self._sync_from, spec_id)
        return self._report

    def _sync_from(self, spec_id: str) -> None:
        parts = parse_spec_id(spec_id)
        level = parts.level

        if level == SpecLevel.EPIC:
            self._sync_epic(spec_id)
            return

        folder_id = self._ensure_folder(parts.epic_id)
        if level == SpecLevel.FEATURE:
            self._sync_feature(spec_id, folder_id)
            return

        if parts.feature_id is None:
            raise MissingParentContainerError(spec_id, "list", "ID has no feature segment")
        list_id = self._ensure_list(parts.feature_id, folder_id)
        if level == SpecLevel.TASK:
            self._sync_item(spec_id, list_id, None)
            return

        parent_spec_id = get_parent_id(spec_id)
        if parts.task is None or parent_spec_id is None:
            raise MissingParentContainerError(spec_id, "parent item", "ID has no task segment")
        parent_remote_id = self._resolve_parent_item(spec_id, parent_spec_id, list_id)
        self._sync_item(spec_id, list_id, parent_remote_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(
        self,
        kind: ActionKind,
        spec_id: str,
        detail: str = "",
        remote_id: str | None = None,
    ) -> None:
        action = SyncAction(
            kind=kind,
            spec_id=spec_id,
            detail=detail,
            remote_id=remote_id,
            dry_run=self.dry_run,
        )
        self._report.actions.append(action)
        if self.dry_run:
            logger.info(f"[DRY RUN] Would {kind.value.replace('_', ' ')} {spec_id}: {detail}")
        else:
            logger.info(f"{kind.value.replace('_', ' ').capitalize()} {spec_id}: {detail}")
        if self.on_action is not None:
            self.on_action(action)

    def _skip(self, spec_id: str, reason: str) -> None:
        logger.warning(f"Skipping {spec_id}: {reason}")
        self._report.skipped.append(SkippedSpec(spec_id=spec_id, reason=reason))

    def _guarded(self, spec_id: str, step: Callable[..., None], *args: Any) -> None:
        """
        Run one branch, containing its failures.

        Throttling and transport errors end the whole run; anything else
        only ends this branch.
        """
        try:
            step(*args)
        except (RemoteThrottledError, RemoteTransportError):
            raise
        except MissingSourceDocumentError as e:
            self._skip(e.spec_id, f"missing spec document: {e.reason}")
        except MissingParentContainerError as e:
            self._skip(e.spec_id, f"{e.container} unavailable: {e.reason}")
        except (ClickUpError, OSError, ValueError) as e:
            self._skip(spec_id, str(e))

    def _children(self, spec_id: str) -> list[str]:
        self.tree.check_declared_children(spec_id)
        if self.children_source == "declared":
            declared = self.tree.declared_child_ids(spec_id)
            if declared:
                return declared
        return self.tree.child_ids(spec_id)

    def _spec_field_id(self, list_id: str) -> str | None:
        if list_id not in self._spec_field_ids:
            field_id = None
            for field in self.client.list_custom_fields(list_id):
                if field.name == self.client.spec_id_field:
                    field_id = field.id
                    break
            self._spec_field_ids[list_id] = field_id
        return self._spec_field_ids[list_id]

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def _ensure_folder(self, epic_id: str) -> str:
        node = self.tree.require(epic_id)
        name = f"{epic_id} - {node.title}"
        folder = self.client.find_folder(self.space_id, name)
        if folder is not None:
            logger.debug(f"Folder exists: {name} ({folder.id})")
            return folder.id

        self._record(ActionKind.CREATE_FOLDER, epic_id, name)
        if self.dry_run:
            raise MissingParentContainerError(epic_id, "folder", f"'{name}' does not exist yet")
        folder = self.client.create_folder(self.space_id, name)
        return folder.id

    def _ensure_list(self, feature_id: str, folder_id: str) -> str:
        node = self.tree.require(feature_id)
        name = f"{feature_id}: {node.title}"
        task_list = self.client.find_list(folder_id, name)
        if task_list is not None:
            logger.debug(f"List exists: {name} ({task_list.id})")
            return task_list.id

        self._record(ActionKind.CREATE_LIST, feature_id, name)
        if self.dry_run:
            raise MissingParentContainerError(feature_id, "list", f"'{name}' does not exist yet")
        task_list = self.client.create_list(folder_id, name)
        return task_list.id

    def _sync_epic(self, epic_id: str) -> None:
        folder_id = self._ensure_folder(epic_id)
        features = self._children(epic_id)
        logger.info(f"Found {len(features)} features to sync under {epic_id}")
        for feature_id in features:
            self._guarded(feature_id, self._sync_feature, feature_id, folder_id)

    def _sync_feature(self, feature_id: str, folder_id: str) -> None:
        list_id = self._ensure_list(feature_id, folder_id)
        tasks = self._children(feature_id)
        if not tasks:
            logger.info(f"No tasks found in {feature_id}")
        for task_id in tasks:
            self._guarded(task_id, self._sync_item, task_id, list_id, None)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _resolve_parent_item(self, spec_id: str, parent_spec_id: str, list_id: str) -> str:
        parent = self.tree.require(parent_spec_id)
        if parent.remote_id:
            return parent.remote_id
        item = self.client.find_item_by_spec_id(list_id, parent_spec_id)
        if item is not None:
            return item.id
        raise MissingParentContainerError(
            spec_id, "parent item", f"{parent_spec_id} is not in ClickUp, sync it first"
        )

    def _sync_item(self, spec_id: str, list_id: str, parent_remote_id: str | None) -> None:
        node = self.tree.require(spec_id)
        target = map_status(node.status).value
        children = self._children(spec_id)

        existing = self.client.find_item_by_spec_id(list_id, spec_id)
        if existing is not None:
            self.tree.set_remote_id(spec_id, existing.id)
            if existing.name != node.item_name:
                self._record(
                    ActionKind.RENAME_ITEM,
                    spec_id,
                    f"{existing.name!r} → {node.item_name!r}",
                    existing.id,
                )
                if not self.dry_run:
                    self.client.update_item(existing.id, {"name": node.item_name})

            for child_id in children:
                self._guarded(child_id, self._sync_item, child_id, list_id, existing.id)

            self._reconcile_status(node, existing.id, existing.status, target, children)
            return

        remote_id = self._create_item(node, list_id, parent_remote_id, target)
        for child_id in children:
            self._guarded(child_id, self._sync_item, child_id, list_id, remote_id)
        self._reconcile_status(node, remote_id, target, target, children)

    def _create_item(
        self,
        node: SpecNode,
        list_id: str,
        parent_remote_id: str | None,
        status: str,
    ) -> str:
        spec_id = node.id
        if self.dry_run:
            remote_id = f"{PENDING_PREFIX}{spec_id}"
        else:
            remote_id = self.client.create_item(list_id, item_fields(node, status)).id
        self._record(ActionKind.CREATE_ITEM, spec_id, f"{node.item_name} [{status}]", remote_id)

        if parent_remote_id is not None:
            self._record(ActionKind.SET_PARENT, spec_id, parent_remote_id, remote_id)
            if not self.dry_run:
                self.client.update_item(remote_id, {"parent": parent_remote_id})

        field_id = self._spec_field_id(list_id)
        if field_id is not None:
            self._record(ActionKind.SET_SPEC_ID, spec_id, self.client.spec_id_field, remote_id)
            if not self.dry_run:
                self.client.set_custom_field(remote_id, field_id, spec_id)

        file_name = (node.path or self.writer.path_for(spec_id)).name
        self._record(ActionKind.WRITE_BACK, spec_id, file_name, remote_id)
        if not self.dry_run:
            self.tree.set_remote_id(spec_id, remote_id)
            try:
                outcome = self.writer.write(spec_id, remote_id, node)
            except OSError as e:
                # The item exists remotely, so its children still sync
                self._skip(spec_id, f"write-back failed: {e}")
            else:
                if not outcome.changed_file:
                    logger.info(f"Write-back for {spec_id}: {outcome.value}")
        return remote_id

    def _reconcile_status(
        self,
        node: SpecNode,
        item_id: str,
        current: str,
        target: str,
        children: list[str],
    ) -> None:
        if children:
            child_statuses = []
            for child_id in children:
                child = self.tree.get(child_id)
                # An unloaded child can never count as complete
                child_statuses.append(map_status(child.status).value if child else "")
            promoted = compute_promotion(target, child_statuses)
            if promoted != target:
                logger.info(
                    f"All {len(children)} children of {node.id} are COMPLETE, promoting to {promoted}"
                )
                target = promoted

        decision = plan_status_update(current, target)
        if decision == StatusDecision.UNCHANGED:
            return
        if decision == StatusDecision.SKIP_DOWNGRADE:
            self._record(
                ActionKind.SKIP_DOWNGRADE,
                node.id,
                f"{current} → {target} (keeping {current})",
                item_id,
            )
            return

        self._record(ActionKind.UPDATE_STATUS, node.id, f"{current} → {target}", item_id)
        if not self.dry_run:
            self.client.update_item(item_id, {"status": target})
