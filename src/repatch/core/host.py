"""Host platform information used for user-facing hints."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Protocol


class PlatformInfo(Protocol):
    """Reports facts about the host the engine runs on."""

    @property
    def is_windows(self) -> bool: ...


class SystemPlatform:
    """PlatformInfo backed by the running interpreter."""

    @property
    def is_windows(self) -> bool:
        return platform.system() == "Windows"


@dataclass(frozen=True)
class StaticPlatform:
    """Fixed PlatformInfo, for callers that already know the answer."""

    is_windows: bool = False
