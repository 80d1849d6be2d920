"""
spectrack CLI - Item commands.

Work on a single ClickUp item: link its pull request or start
development on it in a fresh git worktree.
"""

from pathlib import Path

import typer
from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from rich.console import Console

from spectrack.cli.common import open_client
from spectrack.cli.errors import ExitCode, print_error
from spectrack.core.clickup import (
    ClickUpError,
    CustomFieldNotFoundError,
    link_pull_request,
    start_item,
)
from spectrack.core.config import SpectrackConfig, load_config
from spectrack.core.github import RepoInfo
from spectrack.core.sync import StatusDecision
from spectrack.core.worktree import WorktreeError, WorktreeManager

console = Console()
app = typer.Typer(
    name="item",
    help="Work with a single ClickUp item",
    no_args_is_help=True,
)


def _resolve_repo(config: SpectrackConfig, repo: str | None) -> RepoInfo:
    """Repository from --repo, then config, then the origin remote."""
    value = repo or config.github.repository
    if value:
        info = RepoInfo.parse(value)
        if info is None:
            print_error(f"Not a GitHub repository: {value}", solution="--repo owner/name")
            raise typer.Exit(ExitCode.USER_ERROR)
        return info

    try:
        git_repo = Repo(Path.cwd(), search_parent_directories=True)
        remote_url = git_repo.remotes.origin.url
    except (InvalidGitRepositoryError, NoSuchPathError, AttributeError, ValueError):
        remote_url = ""

    info = RepoInfo.from_remote_url(remote_url)
    if info is None:
        print_error(
            "Could not determine the GitHub repository",
            reason="No --repo given, GITHUB_REPOSITORY unset and no GitHub origin remote",
            solution="spectrack item link-pr <ITEM> <PR> --repo owner/name",
        )
        raise typer.Exit(ExitCode.USER_ERROR)
    return info


def _print_status(decision: StatusDecision, target: str, current: str) -> None:
    if decision == StatusDecision.UPDATE:
        console.print(f"[green]✓[/green] Status set to {target}")
    elif decision == StatusDecision.SKIP_DOWNGRADE:
        console.print(f"[dim]Status kept at {current} (not moving back to {target})[/dim]")
    else:
        console.print(f"[dim]Status already {current}[/dim]")


@app.command("link-pr")
def link_pr(
    item_id: str = typer.Argument(..., help="ClickUp item ID"),
    pr_number: int = typer.Argument(..., help="Pull request number"),
    repo: str | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="GitHub repository as owner/name (default: origin remote)",
    ),
) -> None:
    """
    Link a pull request to an item and mark it COMPLETE.

    Sets the item's "Pull Request" custom field to the PR URL.

    Examples:
        spectrack item link-pr 86abc123 42
        spectrack item link-pr 86abc123 42 --repo acme/widgets
    """
    config = load_config()
    repo_info = _resolve_repo(config, repo)

    try:
        with open_client(config, min_interval=config.clickup.status_interval) as client:
            result = link_pull_request(
                client,
                item_id,
                pr_number,
                repo_info,
                field_name=config.clickup.pr_field,
            )
    except typer.Exit:
        raise
    except CustomFieldNotFoundError as e:
        print_error(str(e), solution=f"Add a '{config.clickup.pr_field}' URL field to the list")
        raise typer.Exit(ExitCode.USER_ERROR)
    except ClickUpError as e:
        print_error(f"ClickUp request failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    console.print(f"[green]✓[/green] Linked {result.pr_url} to {result.item.name}")
    _print_status(result.status_decision, "COMPLETE", result.item.status)


@app.command("start")
def start(
    item_id: str = typer.Argument(..., help="ClickUp item ID"),
    base_dir: Path | None = typer.Option(
        None,
        "--base-dir",
        help="Directory for worktrees (default: worktrees/ in the repository)",
    ),
) -> None:
    """
    Start development on an item.

    Creates a git worktree on a branch named after the item and moves the
    item to IN PROGRESS (unless it is already further along).

    Examples:
        spectrack item start 86abc123
        spectrack item start 86abc123 --base-dir ../trees
    """
    config = load_config()

    try:
        manager = WorktreeManager(base_dir=base_dir or config.worktree.base_dir)
        with open_client(config, min_interval=config.clickup.status_interval) as client:
            result = start_item(client, item_id, manager)
    except typer.Exit:
        raise
    except WorktreeError as e:
        print_error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except ClickUpError as e:
        print_error(f"ClickUp request failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    verb = "Created" if result.created_worktree else "Reusing"
    console.print(f"[green]✓[/green] {verb} worktree: {result.worktree.path}")
    console.print(f"  Branch: {result.worktree.branch}")
    _print_status(result.status_decision, "IN PROGRESS", result.item.status)
