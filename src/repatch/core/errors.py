"""
Exception hierarchy for repatch.

Every failure that ends a synchronization run is a RepatchError. Non-zero
exits from steps that are known to be benign never become exceptions; the
engine checks the step identity instead (see SyncStep.tolerated).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repatch.core.patches.models import PatchFile
    from repatch.core.sync.models import SyncStep


class RepatchError(Exception):
    """Base exception for repatch operations."""

    pass


class ConfigurationError(RepatchError):
    """Raised when the configured paths or branches cannot be used."""

    pass


class LaunchFailure(RepatchError):
    """Raised when a command cannot be started at all."""

    def __init__(self, message: str, command: Sequence[str] | None = None):
        super().__init__(message)
        self.command = list(command) if command else None


class SyncFailure(RepatchError):
    """Raised when a non-tolerated step exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        step: SyncStep | None = None,
        command: Sequence[str] | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message)
        self.step = step
        self.command = list(command) if command else None
        self.exit_code = exit_code


class PatchApplyFailure(SyncFailure):
    """
    Raised when the patch queue did not apply cleanly.

    The output repository is left mid-apply and the recovery marker is
    written, so a human can finish the apply and regenerate the queue.
    """

    def __init__(
        self,
        message: str,
        *,
        marker_path: Path,
        patches: Sequence[PatchFile] = (),
        step: SyncStep | None = None,
        command: Sequence[str] | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(message, step=step, command=command, exit_code=exit_code)
        self.marker_path = marker_path
        self.patches = list(patches)
