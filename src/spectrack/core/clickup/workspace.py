"""Team and space resolution for a configured workspace."""

import logging

from spectrack.core.clickup.client import ClickUpClient
from spectrack.core.clickup.exceptions import WorkspaceNotFoundError
from spectrack.core.clickup.models import Space, Team

logger = logging.getLogger(__name__)


def resolve_team(client: ClickUpClient, team_id: str | None = None) -> Team:
    """
    Pick the team to work in: the one with ``team_id``, else the first.

    Raises:
        WorkspaceNotFoundError: If there are no teams or ``team_id`` is unknown
    """
    teams = client.list_teams()
    if not teams:
        raise WorkspaceNotFoundError("No teams available for this API key")
    if team_id is None:
        return teams[0]
    for team in teams:
        if team.id == str(team_id):
            return team
    raise WorkspaceNotFoundError(
        f"Team {team_id} not found", [f"{t.name} ({t.id})" for t in teams]
    )


def resolve_space(
    client: ClickUpClient,
    space_id: str | None = None,
    space_name: str | None = None,
    team_id: str | None = None,
) -> Space:
    """
    Resolve the space the sync writes into.

    Lookup order: explicit ``space_id``, then exact ``space_name``, then the
    first space of the team.

    Raises:
        WorkspaceNotFoundError: If the space cannot be found; the message
            lists the spaces that do exist
    """
    team = resolve_team(client, team_id)
    spaces = client.list_spaces(team.id)
    available = [f"{s.name} ({s.id})" for s in spaces]

    if space_id:
        for space in spaces:
            if space.id == str(space_id):
                return space
        raise WorkspaceNotFoundError(f"Space {space_id} not found in team {team.name}", available)

    if space_name:
        for space in spaces:
            if space.name == space_name:
                return space
        raise WorkspaceNotFoundError(
            f"Space '{space_name}' not found in team {team.name}", available
        )

    if not spaces:
        raise WorkspaceNotFoundError(f"Team {team.name} has no spaces")
    logger.info(f"No space configured, using first space: {spaces[0].name}")
    return spaces[0]
