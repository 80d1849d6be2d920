"""
spectrack CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from spectrack import __version__
from spectrack.cli import item, links, ready, sync
from spectrack.core.config.env import load_layered_env

# Help panel names for command grouping
PANEL_SYNC = "Sync Specs"
PANEL_ITEMS = "Work with Items"

# Create the main Typer app
app = typer.Typer(
    name="spectrack",
    help="Keep a hierarchical spec tree in sync with ClickUp",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    """Send library logging to stderr: WARNING by default, DEBUG with --debug."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    spectrack - mirror specs into ClickUp.

    Epics become folders, features become lists, tasks become items and
    subtasks/extensions become subitems. Remote IDs are written back into
    the spec files so later runs find the same items.

    Common Workflows:
        spectrack sync E02 --dry-run      # Preview
        spectrack sync E02                # Apply
        spectrack ready                   # What can be picked up
        spectrack item start <ITEM>       # Worktree + IN PROGRESS
        spectrack item link-pr <ITEM> 42  # PR link + COMPLETE
    """
    # Load layered env files early so the API key is available to all commands.
    # Precedence: OS env > .env.local > .env > user .env
    load_layered_env()
    configure_logging(debug)

    ctx.obj = {"debug": debug}


# =============================================================================
# Sync Specs
# =============================================================================

app.command(name="sync", rich_help_panel=PANEL_SYNC)(sync.sync)
app.add_typer(links.app, name="links", rich_help_panel=PANEL_SYNC)


# =============================================================================
# Work with Items
# =============================================================================

app.command(name="ready", rich_help_panel=PANEL_ITEMS)(ready.ready)
app.add_typer(item.app, name="item", rich_help_panel=PANEL_ITEMS)


@app.command()
def version() -> None:
    """Show spectrack version and exit."""
    console.print(f"spectrack version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
