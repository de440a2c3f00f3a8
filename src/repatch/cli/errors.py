"""
Standardized error handling and exit codes for the repatch CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for repatch CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """A git step failed or git could not be started."""

    USER_ERROR = 2
    """Configuration or input error (actionable by user)."""

    PATCH_CONFLICT = 3
    """The patch queue did not apply cleanly and awaits manual resolution."""


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
        ...     "Upstream directory does not exist",
        ...     solution="git submodule update --init",
        ... )
    """
    # Messages may carry git or pydantic output with square brackets
    console.print(f"[red]Error:[/red] {escape(problem)}", highlight=False)

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]", highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_config_error(message: str) -> None:
    """Print error when the configured directories cannot be used."""
    print_error(
        message,
        reason="repatch needs an upstream git repository and a patch directory",
        solution="Check .repatch.json or pass --upstream / --patches",
    )


def print_launch_error(git_executable: str, reason: str) -> None:
    """Print error when git could not be started."""
    print_error(
        f"Could not run '{git_executable}'",
        reason=reason,
        solution="Install git or set REPATCH_GIT to its full path",
    )


def print_conflict_error(marker_path: Path) -> None:
    """Print the follow-up for a conflicted apply."""
    print_error(
        "Failed to apply patches",
        reason=f"Recovery marker written to {marker_path}",
        solution="git am --continue  # after resolving conflicts in the output repository",
    )
