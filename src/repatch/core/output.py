"""
Output routing for git invocations.

Each invocation names an OutputPolicy; the router turns that policy plus the
verbose flag into a pair of sinks for the process runner. A sink of None
means the stream is discarded. Using the same sink for both streams merges
stderr into stdout.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO


class OutputPolicy(str, Enum):
    """How a single command's output should reach the console."""

    SUPPRESS_ALL = "suppress_all"
    """Discard both streams, even in verbose mode."""

    MERGE_ERRORS = "merge_errors"
    """Verbose: stderr folded into stdout. Quiet: nothing."""

    SEPARATE_STREAMS = "separate_streams"
    """Verbose: stdout and stderr to their own consoles. Quiet: nothing."""

    ERRORS_ONLY = "errors_only"
    """stderr always shown; stdout only in verbose mode."""

    STDOUT_ONLY = "stdout_only"
    """Verbose: stdout only, stderr discarded. Quiet: nothing."""


@dataclass(frozen=True)
class StreamSinks:
    """Destination for a command's stdout and stderr (None discards)."""

    stdout: TextIO | None = None
    stderr: TextIO | None = None

    @property
    def merged(self) -> bool:
        return self.stdout is not None and self.stdout is self.stderr


class OutputRouter:
    """
    Decides which console streams a command may write to.

    Example:
        >>> router = OutputRouter(verbose=False)
        >>> router.route(OutputPolicy.ERRORS_ONLY).stdout is None
        True
    """

    def __init__(
        self,
        verbose: bool = False,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """
        Args:
            verbose: Whether command output is streamed to the console
            stdout: Console stdout (defaults to sys.stdout at routing time)
            stderr: Console stderr (defaults to sys.stderr at routing time)
        """
        self.verbose = verbose
        self._stdout = stdout
        self._stderr = stderr

    @property
    def console_out(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def console_err(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def route(self, policy: OutputPolicy) -> StreamSinks:
        """Resolve a policy into concrete sinks."""
        if policy is OutputPolicy.SUPPRESS_ALL:
            return StreamSinks()

        if policy is OutputPolicy.ERRORS_ONLY:
            out = self.console_out if self.verbose else None
            return StreamSinks(stdout=out, stderr=self.console_err)

        if not self.verbose:
            return StreamSinks()

        if policy is OutputPolicy.MERGE_ERRORS:
            out = self.console_out
            return StreamSinks(stdout=out, stderr=out)
        if policy is OutputPolicy.SEPARATE_STREAMS:
            return StreamSinks(stdout=self.console_out, stderr=self.console_err)
        if policy is OutputPolicy.STDOUT_ONLY:
            return StreamSinks(stdout=self.console_out)

        raise ValueError(f"Unknown output policy: {policy!r}")
