"""
Pydantic models for ClickUp API payloads.

Only the fields spectrack reads are modelled; everything else in a
response is ignored. ClickUp returns nested objects for a few scalar
concepts (``status: {"status": "in progress"}``, ``list: {"id": "..."}``)
which the validators below flatten.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Remote(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def stringify_id(cls, data: Any) -> Any:
        # Team IDs come back as numbers
        if isinstance(data, dict) and data.get("id") is not None:
            data = {**data, "id": str(data["id"])}
        return data


class Team(_Remote):
    """A ClickUp workspace (called a team in API v2)."""


class Space(_Remote):
    """A space inside a team."""


class Folder(_Remote):
    """A folder; one per epic, named ``"{epicId} - {title}"``."""


class TaskList(_Remote):
    """A list; one per feature, named ``"{featureId}: {title}"``."""


class CustomField(_Remote):
    """Custom field definition on a list, or a value on an item."""

    type: str | None = None
    value: Any = None


class Item(_Remote):
    """
    A ClickUp task.

    Tasks, subtasks and extensions are all plain items; nesting is expressed
    through ``parent``.
    """

    status: str = ""
    parent: str | None = None
    list_id: str | None = None
    url: str | None = None
    custom_fields: list[CustomField] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def flatten_nested(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        status = data.get("status")
        if isinstance(status, dict):
            data["status"] = status.get("status") or ""
        elif status is None:
            data["status"] = ""
        task_list = data.get("list")
        if isinstance(task_list, dict) and task_list.get("id") is not None:
            data["list_id"] = str(task_list["id"])
        if data.get("custom_fields") is None:
            data["custom_fields"] = []
        return data

    @property
    def normalized_status(self) -> str:
        """Upper-cased status for case-insensitive comparisons."""
        return self.status.strip().upper()

    def has_spec_prefix(self, spec_id: str) -> bool:
        """True when the name starts with ``"{spec_id}: "``."""
        return self.name.startswith(f"{spec_id}: ")

    def custom_field_value(self, name: str) -> Any:
        for field in self.custom_fields:
            if field.name == name:
                return field.value
        return None
