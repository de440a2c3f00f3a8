"""
Adapter between configuration and the synchronization engine.

Validates a RepatchConfig, builds a PatchQueueSync from it and runs it. The
engine itself knows nothing about config files or the CLI.
"""

from __future__ import annotations

import logging

from rich.console import Console

from repatch.core.config import RepatchConfig
from repatch.core.errors import ConfigurationError
from repatch.core.host import PlatformInfo
from repatch.core.process import CommandRunner, run_command
from repatch.core.sync import OutputRepository, PatchQueueSync, SyncResult, UpstreamRef

logger = logging.getLogger(__name__)


def validate_config(config: RepatchConfig) -> None:
    """
    Check that the configured directories can be used.

    Raises:
        ConfigurationError: If the upstream or patch directory is unusable
    """
    if not config.upstream_dir.is_dir():
        raise ConfigurationError(f"Upstream directory does not exist: {config.upstream_dir}")
    if not (config.upstream_dir / ".git").exists():
        raise ConfigurationError(f"Upstream is not a git repository: {config.upstream_dir}")
    if not config.patch_dir.is_dir():
        raise ConfigurationError(f"Patch directory does not exist: {config.patch_dir}")
    if config.output_dir.absolute() == config.upstream_dir.absolute():
        raise ConfigurationError("Output directory must differ from the upstream directory")


def create_engine(
    config: RepatchConfig,
    *,
    runner: CommandRunner = run_command,
    platform: PlatformInfo | None = None,
    console: Console | None = None,
    error_console: Console | None = None,
) -> PatchQueueSync:
    """Build an engine for a validated configuration."""
    return PatchQueueSync(
        UpstreamRef(
            path=config.upstream_dir,
            branch=config.branch,
            upstream_branch=config.upstream_branch,
        ),
        OutputRepository(path=config.output_dir),
        config.patch_dir,
        verbose=config.verbose,
        runner=runner,
        platform=platform,
        console=console,
        error_console=error_console,
        git_executable=config.git_executable,
        patch_extension=config.patch_extension,
        rebuild_command=config.rebuild_command,
    )


def apply_patches(
    config: RepatchConfig,
    *,
    runner: CommandRunner = run_command,
    platform: PlatformInfo | None = None,
    console: Console | None = None,
    error_console: Console | None = None,
) -> SyncResult:
    """
    Validate the configuration and run one synchronization.

    Raises:
        ConfigurationError: If the configuration is unusable
        LaunchFailure: If git cannot be started
        SyncFailure: If a git step fails
        PatchApplyFailure: If the queue does not apply cleanly
    """
    validate_config(config)
    engine = create_engine(
        config,
        runner=runner,
        platform=platform,
        console=console,
        error_console=error_console,
    )
    result = engine.run()
    logger.info(result.summary())
    return result
