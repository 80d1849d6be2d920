"""Environment loading helpers.

spectrack supports layered environment files:
- OS environment (highest precedence)
- Project environment files (.env, then .env.local)
- User environment file (~/.config/spectrack/.env)

Files never override variables that are already present in the process
environment (e.g. exported in the shell). Within the files, later layers
override earlier ones.

Precedence implemented here:
  os.environ (pre-existing) > .env.local > .env > user .env
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


def _read_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    values = dotenv_values(path)
    out: dict[str, str] = {}
    for k, v in values.items():
        if k is None or v is None:
            continue
        out[str(k)] = str(v)
    return out


def default_user_env_paths() -> list[Path]:
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
    return [xdg_home / "spectrack" / ".env"]


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """Load environment variables from user + project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        Names of the variables that were set from files

    Notes:
        Keys set from an earlier file may be overridden by a later file, but
        keys that were in the OS environment before loading never are.
    """
    if project_dir is None:
        project_dir = Path.cwd()

    if user_env_paths is None:
        user_env_paths = default_user_env_paths()

    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    file_set_keys: set[str] = set()
    for p in [*user_env_paths, *project_env_paths]:
        values = _read_env(Path(p))
        if values:
            logger.debug(f"Loading {len(values)} variables from {p}")
        for k, v in values.items():
            if k not in os.environ or k in file_set_keys:
                os.environ[k] = v
                file_set_keys.add(k)

    return sorted(file_set_keys)
