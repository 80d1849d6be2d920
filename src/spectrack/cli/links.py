"""
spectrack CLI - Link maintenance commands.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from spectrack.cli.common import open_client, select_space
from spectrack.cli.errors import ExitCode, print_error
from spectrack.core.clickup import ClickUpError
from spectrack.core.config import load_config
from spectrack.core.specs import SpecWriter, load_spec_tree
from spectrack.core.sync import migrate_links

console = Console()
app = typer.Typer(
    name="links",
    help="Maintain spec ↔ ClickUp item links",
    no_args_is_help=True,
)


@app.command("migrate")
def migrate(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Report what would be linked without writing spec files",
    ),
    space: str | None = typer.Option(None, "--space", help="ClickUp space name"),
    space_id: str | None = typer.Option(None, "--space-id", help="ClickUp space ID"),
    specs_dir: Path | None = typer.Option(None, "--specs-dir", help="Specs root directory"),
) -> None:
    """
    Backfill ClickUp item IDs into spec files.

    Walks every folder, list and item of the space, matches items to specs
    by the spec ID their name starts with, and writes clickup_task_id into
    specs that do not have one yet.

    Examples:
        spectrack links migrate --dry-run
        spectrack links migrate
    """
    config = load_config()
    root = specs_dir or config.specs.root
    if not root.is_dir():
        print_error(f"Specs directory not found: {root}")
        raise typer.Exit(ExitCode.USER_ERROR)

    tree = load_spec_tree(root, suffix=config.specs.suffix)
    console.print(f"[blue]Loaded {len(tree)} specs from {root}[/blue]")

    try:
        with open_client(config, min_interval=config.clickup.status_interval) as client:
            target = select_space(client, config, space, space_id)
            result = migrate_links(
                client,
                target.id,
                tree,
                writer=SpecWriter(root, suffix=config.specs.suffix),
                dry_run=dry_run,
            )
    except typer.Exit:
        raise
    except ClickUpError as e:
        print_error(f"ClickUp request failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    table = Table(title="Migration summary", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Items scanned", str(result.total_items))
    table.add_row("Matched to a spec ID", str(result.matched_items))
    table.add_row("Without spec ID", str(result.skipped_items))
    table.add_row("Would link" if dry_run else "Linked", str(result.updated_specs))
    table.add_row("Already linked", str(result.already_linked))
    table.add_row("Errors", str(len(result.errors)))
    console.print(table)

    for error in result.errors:
        console.print(f"[yellow]⚠[/yellow]  {error}")

    if dry_run:
        console.print("[dim]Dry run: no spec files were modified[/dim]")
