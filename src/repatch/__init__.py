"""
repatch - Patch queue synchronization

Keeps a downstream tree as an ordered queue of git patches applied on top
of a moving upstream repository.
"""

__version__ = "0.3.0"

# Re-export core types for convenience
from repatch.core.config.models import RepatchConfig
from repatch.core.sync import OutputRepository, PatchQueueSync, SyncResult, UpstreamRef

__all__ = [
    "OutputRepository",
    "PatchQueueSync",
    "RepatchConfig",
    "SyncResult",
    "UpstreamRef",
    "__version__",
]
