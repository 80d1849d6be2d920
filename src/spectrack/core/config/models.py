"""
Configuration data models for spectrack.

These models define the structure of .spectrack.json and
~/.config/spectrack/config.json files, with validation and type safety
via Pydantic.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClickUpConfig(BaseModel):
    """
    ClickUp connection and workspace selection.

    The API key is normally supplied through CLICKUP_API_KEY rather than a
    config file.
    """

    api_key: str | None = Field(
        default=None,
        description="Personal API token (prefer the CLICKUP_API_KEY env var)",
    )
    team_id: str | None = Field(default=None, description="Team to use (default: first)")
    space_id: str | None = Field(default=None, description="Space ID to sync into")
    space_name: str | None = Field(default=None, description="Space name to sync into")
    min_interval: float = Field(
        default=0.2,
        ge=0.0,
        description="Seconds between API calls for structural sync",
    )
    status_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Seconds between API calls for item workflows and migration",
    )
    retry_after_default: float = Field(
        default=60.0,
        ge=0.0,
        description="Wait after a 429 without a Retry-After header",
    )
    spec_id_field: str = Field(
        default="Spec ID",
        description="List custom field holding an item's spec ID",
    )
    pr_field: str = Field(
        default="Pull Request",
        description="Item custom field that receives pull request links",
    )
    ready_status: str = Field(
        default="READY TO IMPLEMENT",
        description="Status listed by 'spectrack ready'",
    )

    @field_validator("team_id", "space_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: object) -> object:
        """Numeric IDs in JSON are accepted."""
        if isinstance(v, int):
            return str(v)
        return v


class SpecsConfig(BaseModel):
    """Location and layout of the spec documents."""

    root: Path = Field(default=Path("specs"), description="Specs root directory")
    suffix: str = Field(default=".spec.md", description="Spec document filename suffix")
    children_source: str = Field(
        default="directory",
        description="'directory' (children on disk) or 'declared' (header children, else directories)",
    )

    @field_validator("children_source")
    @classmethod
    def validate_children_source(cls, v: str) -> str:
        if v not in ("declared", "directory"):
            raise ValueError("children_source must be 'declared' or 'directory'")
        return v


class GitHubConfig(BaseModel):
    """Repository used for pull request links."""

    repository: str | None = Field(
        default=None,
        description="owner/repo slug; falls back to the origin remote",
    )


class WorktreeConfig(BaseModel):
    """Where item worktrees are created."""

    base_dir: Path = Field(
        default=Path("worktrees"),
        description="Worktree base directory, relative to the repository root",
    )


class SpectrackConfig(BaseModel):
    """
    Top-level spectrack configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = SpectrackConfig(clickup=ClickUpConfig(space_name="Engineering"))
        >>> config.clickup.min_interval
        0.2
        >>> config.specs.root
        PosixPath('specs')
    """

    clickup: ClickUpConfig = Field(
        default_factory=ClickUpConfig,
        description="ClickUp connection settings",
    )
    specs: SpecsConfig = Field(
        default_factory=SpecsConfig,
        description="Spec tree settings",
    )
    github: GitHubConfig = Field(
        default_factory=GitHubConfig,
        description="GitHub settings",
    )
    worktree: WorktreeConfig = Field(
        default_factory=WorktreeConfig,
        description="Worktree settings",
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,  # Validate on field assignment
    )
