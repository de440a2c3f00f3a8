"""
Patch queue loading.

Example:
    >>> from repatch.core.patches import load_patches
    >>> for patch in load_patches(Path("patches")):
    ...     print(patch.ordinal, patch.name)
"""

from .loader import DEFAULT_EXTENSION, load_patches
from .models import PatchFile

__all__ = ["DEFAULT_EXTENSION", "PatchFile", "load_patches"]
