"""Custom pydantic-settings source for helmlet's TOML settings files.

This module provides a settings source that plugs into pydantic-settings'
`settings_customise_sources()` to handle layered TOML discovery and deep
merging.
"""

from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic_settings.sources import InitSettingsSource

from .loader import load_all_configs


class HelmletTomlSettingsSource(InitSettingsSource):
    """Settings source that loads from helmlet's TOML settings hierarchy.

    Priority order (lowest to highest):
    1. User config (~/.config/helmlet/config.toml)
    2. Project base config (helmlet.toml or .helmlet/config.toml)
    3. Project local config (helmlet.local.toml or .helmlet/config.local.toml)

    When explicit_config is provided, ONLY that file is used (no discovery).
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        project_dir: Path,
        explicit_config: Path | None = None,
    ) -> None:
        """Initialize the TOML settings source.

        Args:
            settings_cls: The pydantic-settings class.
            project_dir: The project directory for config discovery.
            explicit_config: Explicit config file path (--config option).

        Raises:
            ConfigFileNotFoundError: If explicit_config doesn't exist.
            DuplicateConfigError: If conflicting config files exist.
        """
        self.project_dir = project_dir
        self.explicit_config = explicit_config

        toml_data, self.loaded_files = load_all_configs(project_dir, explicit_config)
        super().__init__(settings_cls, toml_data)
