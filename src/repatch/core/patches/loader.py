"""
Patch queue discovery.

The queue is every file in the patch directory ending in the patch
extension, ordered by plain lexicographic file name. Name patches with
zero-padded numeric prefixes (0001-..., 0002-...) so that sort order is the
intended application order; nothing inside the patch is consulted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .models import PatchFile

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".patch"


def load_patches(directory: Path, extension: str = DEFAULT_EXTENSION) -> list[PatchFile]:
    """
    Load the ordered patch queue from a directory.

    Args:
        directory: Flat directory holding the patch files
        extension: Suffix a file name must end with to count as a patch

    Returns:
        Patches in application order. Empty when the directory is missing
        or has no matching files.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.debug("Patch directory %s does not exist", directory)
        return []

    names = sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.name.endswith(extension) and entry.is_file()
    )

    patches = [
        PatchFile(ordinal=index, name=name, path=(directory / name).absolute())
        for index, name in enumerate(names, start=1)
    ]
    logger.debug("Loaded %d patches from %s", len(patches), directory)
    return patches
