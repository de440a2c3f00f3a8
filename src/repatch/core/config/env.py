"""
REPATCH_* variables from .env files.

Files are read in increasing precedence:

    ~/.config/repatch/.env  <  <project>/.env  <  <project>/.env.local

Only REPATCH_* keys are taken, so a project .env cannot leak variables such
as GIT_DIR into the git processes repatch starts. A variable already set in
the process environment always wins over every file.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "REPATCH_"
PROJECT_ENV_FILES = (".env", ".env.local")


def get_user_env_path() -> Path:
    """Path to ~/.config/repatch/.env (or XDG equivalent)."""
    return get_xdg_config_home() / "repatch" / ".env"


def read_env_file(path: Path) -> dict[str, str]:
    """REPATCH_* assignments in one .env file (empty if the file is missing)."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key and key.startswith(ENV_PREFIX) and value is not None
    }


def load_layered_env(
    project_dir: Path | None = None,
    *,
    user_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export REPATCH_* values from the user and project .env files.

    Args:
        project_dir: Directory holding .env and .env.local (defaults to cwd)
        user_env_paths: User-level files (defaults to the XDG location)

    Returns:
        The variables that were exported, i.e. those not already set
    """
    if project_dir is None:
        project_dir = Path.cwd()
    if user_env_paths is None:
        user_env_paths = [get_user_env_path()]

    values: dict[str, str] = {}
    for path in [*user_env_paths, *(project_dir / name for name in PROJECT_ENV_FILES)]:
        values.update(read_env_file(Path(path)))

    exported = {key: value for key, value in values.items() if key not in os.environ}
    os.environ.update(exported)
    if exported:
        logger.debug("Loaded %s from .env files", ", ".join(sorted(exported)))
    return exported
