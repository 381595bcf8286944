"""Settings package for helmlet.

This package provides TOML-based settings with layered discovery
and merging from user-level and project-level files.
"""

from helmlet.config.loader import (
    discover_project_config,
    discover_user_config,
    get_config_home,
    load_all_configs,
    load_toml_file,
)
from helmlet.config.settings import (
    HelmletSettings,
    clear_config_context,
    set_config_context,
)
from helmlet.config.sources import HelmletTomlSettingsSource
from helmlet.exceptions import (
    ConfigError,
    ConfigFileNotFoundError,
    DuplicateConfigError,
)

__all__ = [
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "DuplicateConfigError",
    # Discovery (loader)
    "discover_project_config",
    "discover_user_config",
    "get_config_home",
    "load_all_configs",
    "load_toml_file",
    # Settings
    "HelmletSettings",
    "set_config_context",
    "clear_config_context",
    # Sources
    "HelmletTomlSettingsSource",
]
