"""Helpers shared by commands that talk to ClickUp."""

import typer

from spectrack.cli.errors import ExitCode, print_missing_api_key_error, print_workspace_error
from spectrack.core.clickup import ClickUpClient, Space, WorkspaceNotFoundError, resolve_space
from spectrack.core.config import SpectrackConfig


def open_client(config: SpectrackConfig, min_interval: float | None = None) -> ClickUpClient:
    """
    Build a ClickUp client from config, exiting with USER_ERROR without a key.

    ``min_interval`` overrides the structural sync pacing, e.g. with the
    slower status interval for item workflows.
    """
    if not config.clickup.api_key:
        print_missing_api_key_error()
        raise typer.Exit(ExitCode.USER_ERROR)

    return ClickUpClient(
        config.clickup.api_key,
        min_interval=config.clickup.min_interval if min_interval is None else min_interval,
        retry_after_default=config.clickup.retry_after_default,
        spec_id_field=config.clickup.spec_id_field,
    )


def select_space(
    client: ClickUpClient,
    config: SpectrackConfig,
    space_name: str | None = None,
    space_id: str | None = None,
    team_id: str | None = None,
) -> Space:
    """Resolve the target space; command-line options win over config."""
    try:
        return resolve_space(
            client,
            space_id=space_id or config.clickup.space_id,
            space_name=space_name or config.clickup.space_name,
            team_id=team_id or config.clickup.team_id,
        )
    except WorkspaceNotFoundError as e:
        print_workspace_error(e)
        raise typer.Exit(ExitCode.USER_ERROR) from e
