"""
Standardized error handling and exit codes for the spectrack CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for spectrack CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Generic error (remote failure, unexpected exception)."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "ClickUp API key not configured",
        ...     reason="CLICKUP_API_KEY is not set",
        ...     solution="export CLICKUP_API_KEY=pk_...",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_missing_api_key_error() -> None:
    """Print error when no ClickUp API key is configured."""
    print_error(
        "ClickUp API key not configured",
        reason="Set CLICKUP_API_KEY in the environment, .env or ~/.config/spectrack/.env",
        solution="export CLICKUP_API_KEY=pk_...",
    )


def print_malformed_id_error(spec_id: str) -> None:
    """Print error when a spec ID does not follow the grammar."""
    print_error(
        f"Invalid spec ID: {spec_id}",
        reason="Spec IDs look like E02, E02-F01, E02-F01-T01, E02-F01-T01-S01 or E02-F01-T01-X01",
    )


def print_workspace_error(error: Exception) -> None:
    """Print error when the configured team or space cannot be found."""
    print_error(
        str(error),
        solution="spectrack sync <ID> --space <name>  # or set CLICKUP_SPACE_NAME",
    )
