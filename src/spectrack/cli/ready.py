"""
spectrack CLI - Ready command.

Lists items that are ready to be picked up for implementation.
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from spectrack.cli.common import open_client, select_space
from spectrack.cli.errors import ExitCode, print_error
from spectrack.core.clickup import ClickUpError
from spectrack.core.config import load_config
from spectrack.core.sync import list_ready_items

console = Console()


def ready(
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Status to list (default: READY TO IMPLEMENT)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
    space: str | None = typer.Option(None, "--space", help="ClickUp space name"),
    space_id: str | None = typer.Option(None, "--space-id", help="ClickUp space ID"),
) -> None:
    """
    List items ready to implement.

    Examples:
        spectrack ready
        spectrack ready --status "IN REVIEW"
        spectrack ready --json
    """
    config = load_config()
    wanted = status or config.clickup.ready_status

    try:
        with open_client(config, min_interval=config.clickup.status_interval) as client:
            target = select_space(client, config, space, space_id)
            items = list_ready_items(client, target.id, wanted)
    except typer.Exit:
        raise
    except ClickUpError as e:
        print_error(f"ClickUp request failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if json_output:
        typer.echo(json.dumps([item.model_dump() for item in items], indent=2))
        return

    if not items:
        console.print(f"[dim]No items in status {wanted}[/dim]")
        return

    table = Table(title=f"{wanted} ({len(items)})")
    table.add_column("Spec ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("List", style="dim")
    table.add_column("URL", style="blue")
    for item in items:
        table.add_row(item.spec_id or "-", item.name, item.list_name, item.url)
    console.print(table)
