"""
Data models for patch queue synchronization.

UpstreamRef and OutputRepository describe the two repositories a run works
with; SyncStep names every git invocation the engine makes; SyncResult is
what a successful run returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

TARGET_BRANCH = "master"
UPSTREAM_REMOTE = "upstream"


@dataclass(frozen=True)
class UpstreamRef:
    """
    The upstream repository a patch queue is based on.

    Attributes:
        path: Path to the upstream git repository
        branch: Branch (or any ref) tracked in the upstream repository
        upstream_branch: Local mirror branch forced to `branch` on every run
    """

    path: Path
    branch: str
    upstream_branch: str

    @property
    def mirror_ref(self) -> str:
        """Ref of the mirror branch as seen through the output's remote."""
        return f"{UPSTREAM_REMOTE}/{self.upstream_branch}"


@dataclass(frozen=True)
class OutputRepository:
    """The repository the patch queue is applied to."""

    path: Path
    branch: str = field(default=TARGET_BRANCH)

    @property
    def name(self) -> str:
        return self.path.name


class SyncStep(str, Enum):
    """Every git invocation of a run, in execution order."""

    FETCH_UPSTREAM = "fetch_upstream"
    UPDATE_MIRROR = "update_mirror"
    CLONE_OUTPUT = "clone_output"
    REMOVE_REMOTE = "remove_remote"
    ADD_REMOTE = "add_remote"
    FETCH_REMOTE = "fetch_remote"
    CHECKOUT_BRANCH = "checkout_branch"
    CREATE_BRANCH = "create_branch"
    RESET_BRANCH = "reset_branch"
    ABORT_APPLY = "abort_apply"
    APPLY_PATCHES = "apply_patches"

    @property
    def tolerated(self) -> bool:
        """Whether a non-zero exit from this step is expected and ignored."""
        return self in _TOLERATED_STEPS


_TOLERATED_STEPS = frozenset(
    {
        # The remote does not exist yet on a fresh clone
        SyncStep.REMOVE_REMOTE,
        # Falls back to creating the branch
        SyncStep.CHECKOUT_BRANCH,
        # Nothing to abort unless the previous run failed
        SyncStep.ABORT_APPLY,
    }
)


class SyncResult(BaseModel):
    """
    Result of a successful synchronization run.

    Example:
        >>> result = engine.run()
        >>> print(result.summary())
        sync succeeded, 3 patches applied
    """

    success: bool = Field(default=True, description="Whether the run succeeded")

    cloned: bool = Field(
        default=False,
        description="Whether the output repository was cloned during this run",
    )

    patches: list[str] = Field(
        default_factory=list,
        description="Names of the patches applied, in order",
    )

    message: str = Field(default="", description="Human-readable result message")

    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)

    @property
    def duration_seconds(self) -> float | None:
        """Run duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def summary(self) -> str:
        """Generate a human-readable summary of the result."""
        if not self.success:
            return f"sync failed: {self.message}"

        parts = ["sync succeeded"]
        if self.cloned:
            parts.append("output cloned")
        if self.patches:
            noun = "patch" if len(self.patches) == 1 else "patches"
            parts.append(f"{len(self.patches)} {noun} applied")
        else:
            parts.append("no patches to apply")
        if self.message:
            parts.append(self.message)
        return ", ".join(parts)
