"""
Synchronous process runner.

Runs one external command to completion and reports its exit status. A
non-zero exit is a normal result the caller inspects; only a command that
cannot be started raises.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any, Protocol, TextIO

from repatch.core.errors import LaunchFailure

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Callable signature shared by run_command and test doubles."""

    def __call__(
        self,
        working_dir: Path,
        argv: Sequence[str],
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> int: ...


def _target_for(sink: TextIO | None) -> tuple[int | IO[Any], bool]:
    """
    Pick the child-side handle for a sink.

    Returns the handle and whether the output has to be copied into the
    sink after the process exits.
    """
    if sink is None:
        return subprocess.DEVNULL, False
    try:
        fd = sink.fileno()
    except (AttributeError, OSError, ValueError):
        # In-memory sinks (StringIO, captured test streams) have no descriptor
        return subprocess.PIPE, True
    sink.flush()
    return fd, False


def run_command(
    working_dir: Path,
    argv: Sequence[str],
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """
    Run a command and wait for it to exit.

    Args:
        working_dir: Directory the command runs in (must exist)
        argv: Command and arguments, executable first
        stdout: Sink for standard output (None discards it)
        stderr: Sink for standard error (None discards it). Passing the same
            object as stdout merges the two streams.

    Returns:
        The process exit code

    Raises:
        ValueError: If argv is empty
        LaunchFailure: If the working directory is invalid or the
            executable cannot be started
    """
    if not argv:
        raise ValueError("argv must contain at least the executable name")

    cwd = Path(working_dir)
    cmd = [str(arg) for arg in argv]
    if not cwd.is_dir():
        raise LaunchFailure(f"Working directory does not exist: {cwd}", command=cmd)

    merged = stdout is not None and stdout is stderr
    out_target, copy_out = _target_for(stdout)
    if merged:
        err_target: int | IO[Any] = subprocess.STDOUT
        copy_err = False
    else:
        err_target, copy_err = _target_for(stderr)

    logger.debug("Running %s in %s", " ".join(cmd), cwd)

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=out_target,
            stderr=err_target,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise LaunchFailure(f"{cmd[0]} not found in PATH", command=cmd) from e
    except OSError as e:
        raise LaunchFailure(f"Failed to launch {cmd[0]}: {e}", command=cmd) from e

    out_text, err_text = proc.communicate()

    if copy_out and out_text and stdout is not None:
        stdout.write(out_text)
    if copy_err and err_text and stderr is not None:
        stderr.write(err_text)

    logger.debug("%s exited with %d", cmd[0], proc.returncode)
    return proc.returncode
