"""
ID models for hierarchical spec identification.

These Pydantic models provide type-safe representations of the spec
hierarchy: epic → feature → task → subtask → extension.

ID Format Examples:
    - Epic:      E02
    - Feature:   E02-F01
    - Task:      E02-F01-T01
    - Subtask:   E02-F01-T01-S03
    - Extension: E02-F01-T01-X01 (of a task) or E02-F01-T01-S03-X01 (of a subtask)

Each segment is also the name of the directory the spec lives in, so an ID
maps one-to-one onto a location under the specs root.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class SpecLevel(str, Enum):
    """Nesting level of a spec, derived from its deepest ID segment."""

    EPIC = "epic"
    FEATURE = "feature"
    TASK = "task"
    SUBTASK = "subtask"
    EXTENSION = "extension"

    @property
    def directory_prefix(self) -> str:
        """Letter that prefixes this level's ID segment and directory name."""
        return _DIRECTORY_PREFIXES[self]

    @property
    def child_levels(self) -> tuple["SpecLevel", ...]:
        """
        Levels whose specs can nest directly under this level.

        Extensions attach to either a task or a subtask, so both list it.
        """
        return _CHILD_LEVELS[self]


_DIRECTORY_PREFIXES: dict[SpecLevel, str] = {
    SpecLevel.EPIC: "E",
    SpecLevel.FEATURE: "F",
    SpecLevel.TASK: "T",
    SpecLevel.SUBTASK: "S",
    SpecLevel.EXTENSION: "X",
}

_CHILD_LEVELS: dict[SpecLevel, tuple[SpecLevel, ...]] = {
    SpecLevel.EPIC: (SpecLevel.FEATURE,),
    SpecLevel.FEATURE: (SpecLevel.TASK,),
    SpecLevel.TASK: (SpecLevel.SUBTASK, SpecLevel.EXTENSION),
    SpecLevel.SUBTASK: (SpecLevel.EXTENSION,),
    SpecLevel.EXTENSION: (),
}


class SpecIdParts(BaseModel):
    """
    Structured breakdown of a spec ID.

    Segments are kept exactly as written (``E02``, ``F01``...), so
    ``str(parts)`` reproduces the original ID.

    Example:
        >>> parts = SpecIdParts(epic="E02", feature="F01", task="T01")
        >>> parts.level
        <SpecLevel.TASK: 'task'>
        >>> parts.feature_id
        'E02-F01'
        >>> str(parts)
        'E02-F01-T01'
    """

    epic: str
    feature: str | None = None
    task: str | None = None
    subtask: str | None = None
    extension: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("epic")
    @classmethod
    def validate_epic(cls, v: str) -> str:
        """Validate the mandatory epic segment."""
        if not v.startswith("E") or not v[1:].isdigit():
            raise ValueError(f"Epic segment must look like E##, got {v!r}")
        return v

    @property
    def level(self) -> SpecLevel:
        """Deepest segment present."""
        if self.extension:
            return SpecLevel.EXTENSION
        if self.subtask:
            return SpecLevel.SUBTASK
        if self.task:
            return SpecLevel.TASK
        if self.feature:
            return SpecLevel.FEATURE
        return SpecLevel.EPIC

    def segments(self) -> list[str]:
        """Present segments in order, e.g. ``['E02', 'F01', 'T01']``."""
        return [
            s
            for s in (self.epic, self.feature, self.task, self.subtask, self.extension)
            if s
        ]

    def path_segments(self) -> list[str]:
        """Directory names from the specs root down to this spec's directory."""
        return self.segments()

    @property
    def epic_id(self) -> str:
        return self.epic

    @property
    def feature_id(self) -> str | None:
        if not self.feature:
            return None
        return _join(self.epic, self.feature)

    @property
    def task_id(self) -> str | None:
        if not self.task:
            return None
        return _join(self.epic, self.feature, self.task)

    @property
    def subtask_id(self) -> str | None:
        if not self.subtask:
            return None
        return _join(self.epic, self.feature, self.task, self.subtask)

    def __str__(self) -> str:
        """Format as dash-joined segments."""
        return "-".join(self.segments())


def _join(*segments: str | None) -> str:
    return "-".join(s for s in segments if s)
