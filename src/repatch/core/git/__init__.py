"""
Git repository handles.

Example:
    >>> from repatch.core.git import Repository
    >>> repo = Repository(Path("work"))
    >>> repo.reset_hard("upstream/upstream")
"""

from .repository import Repository

__all__ = ["Repository"]
