"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

Command-line flags are applied on top by the CLI.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import RepatchConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = ".repatch.json"

# Env var -> config key. Values are strings; pydantic does the coercion.
ENV_OVERRIDES = {
    "REPATCH_UPSTREAM_DIR": "upstream_dir",
    "REPATCH_PATCH_DIR": "patch_dir",
    "REPATCH_OUTPUT_DIR": "output_dir",
    "REPATCH_BRANCH": "branch",
    "REPATCH_UPSTREAM_BRANCH": "upstream_branch",
    "REPATCH_GIT": "git_executable",
}

_config_cache: RepatchConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Path to ~/.config/repatch/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "repatch" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """Path to .repatch.json in the project root (defaults to cwd)."""
    if cwd is None:
        cwd = Path.cwd()
    return cwd / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`; nested dicts
    are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 20}})
        {'a': 1, 'b': {'x': 10, 'y': 20}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply REPATCH_* environment variable overrides to configuration.

    REPATCH_VERBOSE accepts anything but "false", "0" or "" as true.
    """
    result = config_dict.copy()

    for env_name, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            result[key] = value

    if (verbose := os.environ.get("REPATCH_VERBOSE")) is not None:
        result["verbose"] = verbose.lower() not in ("false", "0", "")

    return result


def get_default_config() -> dict[str, Any]:
    """Hardcoded default configuration."""
    return RepatchConfig().model_dump(mode="json")


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> RepatchConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (REPATCH_*)
        2. Project config (.repatch.json)
        3. User config (~/.config/repatch/config.json)
        4. Hardcoded defaults

    Relative paths are resolved against project_dir.

    Args:
        project_dir: Project directory to load .repatch.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated RepatchConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    if project_dir is None:
        project_dir = Path.cwd()

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = RepatchConfig(**merged).resolve_paths(project_dir)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
