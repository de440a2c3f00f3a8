"""
Patch queue synchronization.

This module rebuilds an output repository as upstream plus an ordered queue
of patch files, leaving a recovery marker behind when the queue conflicts.

Example:
    >>> from repatch.core.sync import OutputRepository, PatchQueueSync, UpstreamRef
    >>> engine = PatchQueueSync(
    ...     UpstreamRef(Path("upstream"), "master", "upstream"),
    ...     OutputRepository(Path("work")),
    ...     Path("patches"),
    ...     verbose=True,
    ... )
    >>> engine.run().summary()
"""

from repatch.core.sync.engine import PatchQueueSync, conflict_diagnostic
from repatch.core.sync.models import (
    TARGET_BRANCH,
    UPSTREAM_REMOTE,
    OutputRepository,
    SyncResult,
    SyncStep,
    UpstreamRef,
)

__all__ = [
    "PatchQueueSync",
    "conflict_diagnostic",
    "OutputRepository",
    "UpstreamRef",
    "SyncResult",
    "SyncStep",
    "TARGET_BRANCH",
    "UPSTREAM_REMOTE",
]
