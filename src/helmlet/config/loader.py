"""Settings file discovery and loading.

Discovers and loads TOML settings files from user-level and
project-level locations, merging them with proper priority.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from helmlet.exceptions import ConfigFileNotFoundError, DuplicateConfigError
from helmlet.values.merge import merge


def get_config_home() -> Path:
    """Get the helmlet config home directory.

    Priority:
    1. $HELMLET_CONFIG_HOME if set
    2. $XDG_CONFIG_HOME/helmlet if XDG_CONFIG_HOME is set
    3. ~/.config/helmlet (default)

    Returns:
        Path to the helmlet config home directory.
    """
    if helmlet_config_home := os.environ.get("HELMLET_CONFIG_HOME"):
        return Path(helmlet_config_home)

    if xdg_config_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config_home) / "helmlet"

    return Path.home() / ".config" / "helmlet"


def discover_user_config() -> Path | None:
    """Discover the user-level settings file.

    Returns:
        Path to config.toml in the config home if it exists, None otherwise.
    """
    config_file = get_config_home() / "config.toml"
    if config_file.is_file():
        return config_file
    return None


def _pick_one(primary: Path, alternate: Path) -> Path | None:
    """Return whichever of two mutually exclusive files exists."""
    if primary.is_file() and alternate.is_file():
        raise DuplicateConfigError([str(primary), str(alternate)])
    if primary.is_file():
        return primary
    if alternate.is_file():
        return alternate
    return None


def discover_project_config(project_dir: Path) -> tuple[Path | None, Path | None]:
    """Discover project-level settings files.

    Looks for:
    - Base config: helmlet.toml OR .helmlet/config.toml (mutually exclusive)
    - Local config: helmlet.local.toml OR .helmlet/config.local.toml
      (mutually exclusive)

    Args:
        project_dir: The project directory to search in.

    Returns:
        Tuple of (base_config_path, local_config_path). Either may be None.

    Raises:
        DuplicateConfigError: If both formats exist at the same level.
    """
    base_config = _pick_one(
        project_dir / "helmlet.toml",
        project_dir / ".helmlet" / "config.toml",
    )
    local_config = _pick_one(
        project_dir / "helmlet.local.toml",
        project_dir / ".helmlet" / "config.local.toml",
    )
    return base_config, local_config


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dict.

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file contains invalid TOML.
    """
    if not path.is_file():
        raise ConfigFileNotFoundError(str(path))

    with open(path, "rb") as f:
        return tomllib.load(f)


def load_all_configs(
    project_dir: Path,
    explicit_config: Path | None = None,
) -> tuple[dict[str, Any], list[Path]]:
    """Load and merge all settings files.

    When explicit_config is provided, ONLY that file is loaded (no merging).
    Otherwise, files are discovered and merged in priority order:
    1. User config (lowest)
    2. Project base config
    3. Project local config (highest)

    Args:
        project_dir: The project directory.
        explicit_config: Explicit config file path (--config option).

    Returns:
        Tuple of (merged_config_dict, list_of_loaded_files).

    Raises:
        ConfigFileNotFoundError: If explicit_config is provided but doesn't exist.
        DuplicateConfigError: If conflicting config files exist.
    """
    if explicit_config is not None:
        return load_toml_file(explicit_config), [explicit_config]

    base_config, local_config = discover_project_config(project_dir)
    candidates = [discover_user_config(), base_config, local_config]

    merged: dict[str, Any] = {}
    loaded_files: list[Path] = []
    for path in candidates:
        if path is None:
            continue
        merge(merged, load_toml_file(path))
        loaded_files.append(path)

    return merged, loaded_files
