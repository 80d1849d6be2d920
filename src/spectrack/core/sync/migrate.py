"""
Whole-space traversals: link migration and ready-item listing.

migrate_links backfills ``clickup_task_id`` into spec files for items that
were created before write-back existed (or by hand). Items are matched to
specs by the spec ID prefix of their name, or their spec ID custom field.

list_ready_items lists every item in a given status (by default
"READY TO IMPLEMENT") across all folders and lists of a space.
"""

import logging

from pydantic import BaseModel, Field

from spectrack.core.clickup.client import ClickUpClient
from spectrack.core.clickup.models import Item
from spectrack.core.ids import extract_spec_id, validate_spec_id
from spectrack.core.specs import SpecTree, SpecWriter, WriteBackOutcome

logger = logging.getLogger(__name__)

DEFAULT_READY_STATUS = "READY TO IMPLEMENT"


class MigrationResult(BaseModel):
    """Counters and errors from a migrate_links run."""

    dry_run: bool = False
    total_items: int = 0
    matched_items: int = 0
    skipped_items: int = 0
    updated_specs: int = 0
    already_linked: int = 0
    errors: list[str] = Field(default_factory=list)


class ReadyItem(BaseModel):
    """An item waiting to be implemented."""

    spec_id: str | None
    item_id: str
    name: str
    status: str
    list_name: str
    folder_name: str
    url: str


def spec_id_for_item(item: Item, spec_id_field: str | None = None) -> str | None:
    """
    Spec ID an item represents.

    The spec ID custom field wins when it holds a valid ID; otherwise the ID
    must open the item name.
    """
    if spec_id_field:
        value = item.custom_field_value(spec_id_field)
        if isinstance(value, str) and validate_spec_id(value.strip()):
            return value.strip()
    spec_id = extract_spec_id(item.name)
    if spec_id and item.name.startswith(spec_id):
        return spec_id
    return None


def migrate_links(
    client: ClickUpClient,
    space_id: str,
    tree: SpecTree,
    writer: SpecWriter | None = None,
    dry_run: bool = False,
) -> MigrationResult:
    """
    Write the remote ID of every matched item into its spec file.

    Files that already carry a remote ID are left alone.

    Args:
        client: ClickUp client
        space_id: Space to walk
        tree: Loaded spec tree (all epics)
        writer: Write-back target; defaults to the tree's root
        dry_run: Count what would change without touching files

    Returns:
        MigrationResult with per-run counters
    """
    writer = writer or SpecWriter(tree.root, suffix=tree.suffix)
    result = MigrationResult(dry_run=dry_run)

    folders = client.list_folders(space_id)
    logger.info(f"Found {len(folders)} folders (epics)")

    for folder in folders:
        for task_list in client.list_lists(folder.id):
            items = client.list_items(task_list.id)
            logger.info(f"{folder.name} / {task_list.name}: {len(items)} items")

            for item in items:
                result.total_items += 1
                spec_id = spec_id_for_item(item, client.spec_id_field)
                if spec_id is None:
                    logger.debug(f"Skipping item without spec ID: {item.name}")
                    result.skipped_items += 1
                    continue

                result.matched_items += 1
                node = tree.get(spec_id)
                if node is None:
                    result.errors.append(f"Spec file not found for {spec_id} (item {item.id})")
                    continue

                if node.remote_id:
                    result.already_linked += 1
                    if node.remote_id != item.id:
                        logger.warning(
                            f"{spec_id} is linked to {node.remote_id}, "
                            f"but item {item.id} also claims it"
                        )
                    continue

                if dry_run:
                    logger.info(f"[DRY RUN] Would link {spec_id} → {item.id}")
                    result.updated_specs += 1
                    tree.set_remote_id(spec_id, item.id)
                    continue

                outcome = writer.write(spec_id, item.id, node)
                if outcome.changed_file:
                    result.updated_specs += 1
                    tree.set_remote_id(spec_id, item.id)
                elif outcome == WriteBackOutcome.ALREADY_LINKED:
                    result.already_linked += 1
                else:
                    result.errors.append(f"Could not link {spec_id}: {outcome.value}")

    return result


def list_ready_items(
    client: ClickUpClient,
    space_id: str,
    status: str = DEFAULT_READY_STATUS,
) -> list[ReadyItem]:
    """List open top-level items in ``status`` across every folder and list."""
    ready: list[ReadyItem] = []
    for folder in client.list_folders(space_id):
        for task_list in client.list_lists(folder.id):
            for item in client.list_items_by_status(task_list.id, status):
                ready.append(
                    ReadyItem(
                        spec_id=spec_id_for_item(item, client.spec_id_field),
                        item_id=item.id,
                        name=item.name,
                        status=item.status,
                        list_name=task_list.name,
                        folder_name=folder.name,
                        url=item.url or f"https://app.clickup.com/t/{item.id}",
                    )
                )
    return ready
