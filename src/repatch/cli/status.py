"""
repatch CLI - Status command.

Shows the state of the output repository and whether a conflicted apply is
waiting to be finished.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from repatch.cli.errors import ExitCode, print_error
from repatch.core.config import load_config
from repatch.core.config.env import load_layered_env
from repatch.core.status import inspect_queue

console = Console()


def status(
    project_dir: Path = typer.Option(
        Path("."),
        "--project-dir",
        "-C",
        help="Directory holding .repatch.json",
    ),
) -> None:
    """
    Show the output repository and patch queue status.

    Exits with code 3 when a previous apply is waiting for conflicts to be
    resolved.

    Examples:
        repatch status
        repatch status -C path/to/project
    """
    base = project_dir.absolute()
    load_layered_env(base)

    try:
        config = load_config(base, use_cache=False)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    queue = inspect_queue(config.output_dir, config.patch_dir, config.patch_extension)

    table = Table(title="Patch Queue", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Upstream", f"{config.upstream_dir} ({config.branch})")
    table.add_row("Patches", f"{queue.patch_count} in {config.patch_dir}")
    table.add_row("Output", str(queue.output_dir))

    if not queue.is_repository:
        table.add_row("State", "[dim]Not created yet[/dim]")
        console.print(table)
        return

    table.add_row("Branch", queue.branch or "[dim]detached[/dim]")
    table.add_row("HEAD", queue.head_commit[:8] if queue.head_commit else "[dim]none[/dim]")
    table.add_row(
        "Last apply",
        "[red]conflicted[/red]" if queue.marker_present else "[green]clean[/green]",
    )
    if queue.apply_in_progress:
        table.add_row("git am", "[yellow]in progress[/yellow]")

    console.print(table)

    if queue.needs_resolution():
        print_error(
            "Patch apply awaiting conflict resolution",
            solution=f"cd {queue.output_dir} && git am --continue",
        )
        raise typer.Exit(ExitCode.PATCH_CONFLICT)
