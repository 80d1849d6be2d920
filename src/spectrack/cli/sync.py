"""
spectrack CLI - Sync command.

Mirrors one spec subtree into ClickUp: epics become folders, features
become lists, tasks become items and subtasks/extensions become subitems.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from spectrack.cli.common import open_client, select_space
from spectrack.cli.errors import ExitCode, print_error, print_malformed_id_error
from spectrack.core.clickup import ClickUpError
from spectrack.core.config import load_config
from spectrack.core.ids import MalformedIdError, parse_spec_id
from spectrack.core.specs import SpecWriter, load_spec_tree
from spectrack.core.sync import HierarchySyncEngine, SyncAction, SyncReport

console = Console()


def _print_action(action: SyncAction) -> None:
    marker = "[yellow]○[/yellow]" if action.dry_run else "[green]✓[/green]"
    console.print(f"{marker} {action.describe()}")


def _print_report(report: SyncReport) -> None:
    table = Table(title="Dry-run summary" if report.dry_run else "Sync summary", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Root", report.root_id)
    table.add_row("Actions", str(len(report.actions)))
    table.add_row("Created", str(report.created_count))
    table.add_row("Updated", str(report.updated_count))
    table.add_row("Skipped", str(len(report.skipped)))

    console.print()
    console.print(table)

    for skipped in report.skipped:
        console.print(f"[yellow]⚠[/yellow]  Skipped {skipped.spec_id}: {skipped.reason}")

    if not report.actions and not report.skipped:
        console.print("[green]✓[/green] Already in sync")


def sync(
    spec_id: str = typer.Argument(
        ...,
        help="Spec ID to sync, with everything below it (e.g. E02, E02-F01-T01)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would change without touching ClickUp or spec files",
    ),
    space: str | None = typer.Option(
        None,
        "--space",
        help="ClickUp space name (overrides CLICKUP_SPACE_NAME)",
    ),
    space_id: str | None = typer.Option(
        None,
        "--space-id",
        help="ClickUp space ID (overrides CLICKUP_SPACE_ID)",
    ),
    team_id: str | None = typer.Option(
        None,
        "--team-id",
        help="ClickUp team ID (default: first team)",
    ),
    specs_dir: Path | None = typer.Option(
        None,
        "--specs-dir",
        help="Specs root directory (default: specs)",
    ),
    children: str | None = typer.Option(
        None,
        "--children",
        help="Where children come from: 'directory' (default) or 'declared'",
    ),
) -> None:
    """
    Sync a spec subtree to ClickUp.

    Creates missing folders, lists and items, renames items whose title
    changed, and moves statuses forward. Statuses are never moved backwards,
    and an item whose children are all complete is marked complete. New item
    IDs are written back into the spec files.

    Examples:
        spectrack sync E02                  # Whole epic
        spectrack sync E02-F01-T01 -n       # Preview one task subtree
        spectrack sync E02 --space Eng      # Pick the space by name
    """
    try:
        parts = parse_spec_id(spec_id)
    except MalformedIdError:
        print_malformed_id_error(spec_id)
        raise typer.Exit(ExitCode.USER_ERROR)

    config = load_config()
    root = specs_dir or config.specs.root
    if not root.is_dir():
        print_error(
            f"Specs directory not found: {root}",
            solution="spectrack sync <ID> --specs-dir <path>",
        )
        raise typer.Exit(ExitCode.USER_ERROR)

    children_source = children or config.specs.children_source

    try:
        tree = load_spec_tree(root, epic=parts.epic, suffix=config.specs.suffix)
        if spec_id not in tree:
            console.print(f"[yellow]⚠[/yellow]  No spec document found for {spec_id}")

        with open_client(config) as client:
            target = select_space(client, config, space, space_id, team_id)
            console.print(f"[blue]Syncing {spec_id} into space {target.name}[/blue]")

            engine = HierarchySyncEngine(
                client,
                tree,
                target.id,
                dry_run=dry_run,
                writer=SpecWriter(root, suffix=config.specs.suffix),
                children_source=children_source,
                on_action=_print_action,
            )
            report = engine.sync(spec_id)

    except typer.Exit:
        raise
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    except ClickUpError as e:
        print_error(f"ClickUp request failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    _print_report(report)
