"""
Recovery marker for failed patch applies.

A single file inside the output repository's git directory records that the
last apply stopped on a conflict and is waiting for a human to finish it.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

MARKER_NAME = "patch-apply-failed"


class RecoveryMarker:
    """Presence flag stored as `<git dir>/patch-apply-failed`."""

    def __init__(self, git_dir: Path) -> None:
        self.git_dir = Path(git_dir)

    @property
    def path(self) -> Path:
        return self.git_dir / MARKER_NAME

    def exists(self) -> bool:
        return self.path.exists()

    def mark(self) -> None:
        """Record that the apply needs manual resolution."""
        self.path.write_text("1")
        logger.debug("Wrote recovery marker %s", self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug("Cleared recovery marker %s", self.path)
