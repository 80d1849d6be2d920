"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import SpectrackConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: SpectrackConfig | None = None

# Environment variable → (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CLICKUP_API_KEY": ("clickup", "api_key"),
    "CLICKUP_TEAM_ID": ("clickup", "team_id"),
    "CLICKUP_SPACE_ID": ("clickup", "space_id"),
    "CLICKUP_SPACE_NAME": ("clickup", "space_name"),
    "SPECTRACK_SPECS_DIR": ("specs", "root"),
    "GITHUB_REPOSITORY": ("github", "repository"),
}


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
    """Path to ~/.config/spectrack/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "spectrack" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """Path to .spectrack.json in the project directory."""
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".spectrack.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> base = {"a": 1, "b": {"x": 10, "y": 20}}
        >>> override = {"b": {"y": 30, "z": 40}, "c": 3}
        >>> deep_merge(base, override)
        {'a': 1, 'b': {'x': 10, 'y': 30, 'z': 40}, 'c': 3}
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
            logger.warning(f"Ignoring config at {path}: top level is not an object")
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system should be resilient
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.
    Empty values are ignored.

    Supported env vars:
        CLICKUP_API_KEY - overrides clickup.api_key
        CLICKUP_TEAM_ID - overrides clickup.team_id
        CLICKUP_SPACE_ID - overrides clickup.space_id
        CLICKUP_SPACE_NAME - overrides clickup.space_name
        SPECTRACK_SPECS_DIR - overrides specs.root
        GITHUB_REPOSITORY - overrides github.repository
    """
    result = config_dict.copy()

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if not value:
            continue
        section_dict = dict(result.get(section) or {})
        section_dict[key] = value
        result[section] = section_dict

    return result


def get_default_config() -> dict[str, Any]:
    """Hardcoded default configuration."""
    return {
        "clickup": {"min_interval": 0.2, "status_interval": 1.0, "retry_after_default": 60.0},
        "specs": {"root": "specs", "suffix": ".spec.md"},
        "worktree": {"base_dir": "worktrees"},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> SpectrackConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (CLICKUP_*, SPECTRACK_*, GITHUB_REPOSITORY)
        2. Project config (.spectrack.json)
        3. User config (~/.config/spectrack/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .spectrack.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated SpectrackConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    user_config_path = get_user_config_path()
    if user_config := load_json_file(user_config_path):
        merged = deep_merge(merged, user_config)

    project_config_path = get_project_config_path(project_dir)
    if project_config := load_json_file(project_config_path):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = SpectrackConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
