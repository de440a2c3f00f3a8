"""
repatch CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from repatch import __version__
from repatch.cli import apply, status

app = typer.Typer(
    name="repatch",
    help="Maintain a downstream tree as a patch queue on top of upstream",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def configure_logging(debug: bool) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
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
    repatch - keep a downstream tree as a queue of patches.

    Quick Start:
        1. Put your patches in patches/ as 0001-*.patch, 0002-*.patch, ...
        2. repatch apply --upstream vendor/lib --output work
        3. On conflict: resolve in work/, `git am --continue`, regenerate patches
    """
    configure_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="apply")(apply.apply)
app.command(name="status")(status.status)


@app.command()
def version() -> None:
    """Show repatch version and exit."""
    console.print(f"repatch version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
