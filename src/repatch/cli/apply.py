"""
repatch CLI - Apply command.

Rebuilds the output repository from upstream plus the patch queue.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from repatch.cli.errors import (
    ExitCode,
    print_config_error,
    print_conflict_error,
    print_error,
    print_launch_error,
)
from repatch.core.config import RepatchConfig, load_config
from repatch.core.config.env import load_layered_env
from repatch.core.errors import (
    ConfigurationError,
    LaunchFailure,
    PatchApplyFailure,
    SyncFailure,
)
from repatch.core.task import apply_patches

console = Console()


def apply_overrides(config: RepatchConfig, base: Path, **overrides: object) -> RepatchConfig:
    """Apply command-line values that were actually given on top of config."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    merged = RepatchConfig(**{**config.model_dump(), **updates})
    return merged.resolve_paths(base)


def apply(
    project_dir: Path = typer.Option(
        Path("."),
        "--project-dir",
        "-C",
        help="Directory holding .repatch.json; relative paths resolve from here",
    ),
    upstream: Path | None = typer.Option(
        None,
        "--upstream",
        help="Upstream git repository",
    ),
    patches: Path | None = typer.Option(
        None,
        "--patches",
        help="Directory of *.patch files",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output repository (cloned from upstream if missing)",
    ),
    branch: str | None = typer.Option(
        None,
        "--branch",
        help="Upstream branch or ref to build on",
    ),
    upstream_branch: str | None = typer.Option(
        None,
        "--upstream-branch",
        help="Mirror branch forced to --branch before applying",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Stream git output while applying",
    ),
) -> None:
    """
    Apply the patch queue on top of upstream.

    Fetches upstream, resets the output repository's master branch to the
    upstream mirror branch and applies every patch in file name order with
    a single three-way `git am`. On a conflict the apply is left open for
    you to finish.

    Examples:
        repatch apply                         # Use .repatch.json
        repatch apply -v                      # Show git output
        repatch apply --upstream vendor/lib --patches patches --output work
    """
    base = project_dir.absolute()
    load_layered_env(base)

    try:
        config = load_config(base, use_cache=False)
        config = apply_overrides(
            config,
            base,
            upstream_dir=upstream,
            patch_dir=patches,
            output_dir=output,
            branch=branch,
            upstream_branch=upstream_branch,
            verbose=True if verbose else None,
        )
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        result = apply_patches(config)
    except ConfigurationError as e:
        print_config_error(str(e))
        raise typer.Exit(ExitCode.USER_ERROR)
    except LaunchFailure as e:
        print_launch_error(config.git_executable, str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except PatchApplyFailure as e:
        print_conflict_error(e.marker_path)
        raise typer.Exit(ExitCode.PATCH_CONFLICT)
    except SyncFailure as e:
        print_error(str(e), reason="The output repository was left as the failed step found it")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if result.patches:
        console.print(
            f"[green]✓[/green] Applied {len(result.patches)} patches to {config.output_dir.name}"
        )
    else:
        console.print(f"[blue]No patches to apply[/blue], {config.output_dir.name} reset")
