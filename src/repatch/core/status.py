"""
Read-only inspection of an output repository.

Reports where the output branch points and whether a previous apply is
waiting for manual conflict resolution.
"""

from __future__ import annotations

from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from pydantic import BaseModel, Field

from repatch.core.marker import RecoveryMarker
from repatch.core.patches import DEFAULT_EXTENSION, load_patches


class QueueStatus(BaseModel):
    """Snapshot of an output repository and its patch queue."""

    output_dir: Path = Field(description="Output repository path")
    exists: bool = Field(default=False, description="Whether the path exists")
    is_repository: bool = Field(default=False, description="Whether it is a git repository")
    branch: str | None = Field(default=None, description="Checked-out branch (None if detached)")
    head_commit: str | None = Field(default=None, description="SHA of HEAD, if any")
    marker_present: bool = Field(
        default=False,
        description="Whether the last apply stopped on a conflict",
    )
    apply_in_progress: bool = Field(
        default=False,
        description="Whether a `git am` session is still open",
    )
    patch_count: int = Field(default=0, ge=0, description="Number of patches in the queue")

    def needs_resolution(self) -> bool:
        """Whether a human has to finish a conflicted apply."""
        return self.marker_present or self.apply_in_progress


def inspect_queue(
    output_dir: Path,
    patch_dir: Path,
    extension: str = DEFAULT_EXTENSION,
) -> QueueStatus:
    """Collect the status of output_dir and the queue in patch_dir."""
    output_dir = Path(output_dir)
    status = QueueStatus(
        output_dir=output_dir,
        exists=output_dir.exists(),
        patch_count=len(load_patches(patch_dir, extension)),
    )
    if not status.exists:
        return status

    try:
        repo = Repo(output_dir)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return status

    git_dir = Path(repo.git_dir)
    status.is_repository = True
    status.marker_present = RecoveryMarker(git_dir).exists()
    status.apply_in_progress = (git_dir / "rebase-apply" / "applying").exists()

    if not repo.head.is_detached:
        status.branch = repo.active_branch.name
    if repo.head.is_valid():
        status.head_commit = repo.head.commit.hexsha

    return status
