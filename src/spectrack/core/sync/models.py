"""
Data models for sync results.

A sync run produces an ordered list of SyncActions. Live and dry runs over
the same remote state produce the same sequence; only ``dry_run`` differs.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ActionKind(str, Enum):
    """Kinds of remote mutations the engine performs."""

    CREATE_FOLDER = "create_folder"
    CREATE_LIST = "create_list"
    CREATE_ITEM = "create_item"
    SET_PARENT = "set_parent"
    SET_SPEC_ID = "set_spec_id"
    RENAME_ITEM = "rename_item"
    UPDATE_STATUS = "update_status"
    SKIP_DOWNGRADE = "skip_downgrade"
    WRITE_BACK = "write_back"


class SyncAction(BaseModel):
    """One step of a sync run."""

    kind: ActionKind
    spec_id: str
    detail: str = ""
    remote_id: str | None = None
    dry_run: bool = False

    def describe(self) -> str:
        prefix = "[DRY RUN] would " if self.dry_run else ""
        verb = self.kind.value.replace("_", " ")
        return f"{prefix}{verb} {self.spec_id}: {self.detail}".rstrip(": ")


class SkippedSpec(BaseModel):
    """A branch of the tree the engine could not process."""

    spec_id: str
    reason: str


class SyncReport(BaseModel):
    """
    Outcome of a sync run.

    Example:
        >>> report = engine.sync("E02")
        >>> report.created_count
        5
        >>> [a.kind.value for a in report.actions][:2]
        ['create_folder', 'create_list']
    """

    root_id: str
    dry_run: bool = False
    actions: list[SyncAction] = Field(default_factory=list)
    skipped: list[SkippedSpec] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        creates = {ActionKind.CREATE_FOLDER, ActionKind.CREATE_LIST, ActionKind.CREATE_ITEM}
        return sum(1 for a in self.actions if a.kind in creates)

    @property
    def updated_count(self) -> int:
        updates = {
            ActionKind.RENAME_ITEM,
            ActionKind.UPDATE_STATUS,
            ActionKind.SET_PARENT,
            ActionKind.SET_SPEC_ID,
        }
        return sum(1 for a in self.actions if a.kind in updates)

    @property
    def has_problems(self) -> bool:
        return bool(self.skipped)

    def actions_of(self, kind: ActionKind) -> list[SyncAction]:
        return [a for a in self.actions if a.kind == kind]
