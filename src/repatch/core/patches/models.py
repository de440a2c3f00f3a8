"""
Data model for patch files in the queue.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PatchFile:
    """
    A single patch in the queue.

    Attributes:
        ordinal: 1-based position in application order
        name: File name, which alone determines the order
        path: Absolute path to the patch file
    """

    ordinal: int
    name: str
    path: Path
