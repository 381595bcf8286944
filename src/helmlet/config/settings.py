"""Settings for helmlet.

Uses Pydantic v2 BaseSettings with custom source ordering for TOML config support.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from helmlet.render import DEFAULT_DELIMITER, DEFAULT_SUFFIXES, parse_delimiters
from helmlet.values.tree import ConflictPolicy

from .sources import HelmletTomlSettingsSource

if TYPE_CHECKING:
    from pydantic_settings.sources import PydanticBaseSettingsSource

# Module-level state for passing context to settings_customise_sources
_project_dir: Path | None = None
_explicit_config: Path | None = None


def set_config_context(project_dir: Path, explicit_config: Path | None = None) -> None:
    """Set context for HelmletSettings instantiation.

    This must be called before creating a HelmletSettings instance to provide
    the project directory and optional explicit config file path for
    TOML config discovery.

    Args:
        project_dir: The project directory for config discovery.
        explicit_config: Explicit config file path (--config option).
    """
    global _project_dir, _explicit_config
    _project_dir = project_dir
    _explicit_config = explicit_config


def clear_config_context() -> None:
    """Clear the config context.

    This is primarily useful for testing to ensure a clean state.
    """
    global _project_dir, _explicit_config
    _project_dir = None
    _explicit_config = None


class HelmletSettings(BaseSettings):
    """Defaults for rendering.

    Settings are loaded from multiple sources with the following priority
    (highest to lowest):
    1. Constructor kwargs (init_settings, i.e. CLI options)
    2. Environment variables with HELMLET_ prefix (env_settings)
    3. TOML config files (merged from user/project/local configs)
    4. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="HELMLET_",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown keys in TOML files
    )

    delimiter: str = Field(
        default=DEFAULT_DELIMITER,
        description="Template delimiter pair, comma separated",
    )

    strict: bool = Field(
        default=False,
        description="Fail on missing keys while rendering",
    )

    conflict_policy: ConflictPolicy = Field(
        default=ConflictPolicy.OVERRIDE,
        description="How values merges treat mapping/non-mapping conflicts",
    )

    template_suffixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SUFFIXES),
        description="File suffixes picked up from --template-dir",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level name",
    )

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        parse_delimiters(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @property
    def delimiters(self) -> tuple[str, str]:
        """The delimiter as a (start, end) pair."""
        return parse_delimiters(self.delimiter)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: "PydanticBaseSettingsSource",
        env_settings: "PydanticBaseSettingsSource",
        dotenv_settings: "PydanticBaseSettingsSource",
        file_secret_settings: "PydanticBaseSettingsSource",
    ) -> tuple["PydanticBaseSettingsSource", ...]:
        """Customize settings sources and their priority.

        Priority order (first = highest):
        1. init_settings - Constructor kwargs
        2. env_settings - HELMLET_* environment variables
        3. toml_source - Merged TOML config files
        """
        project_dir = _project_dir if _project_dir is not None else Path.cwd()

        toml_source = HelmletTomlSettingsSource(
            settings_cls,
            project_dir=project_dir,
            explicit_config=_explicit_config,
        )

        return (init_settings, env_settings, toml_source)
