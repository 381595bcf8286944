"""Exceptions for helmlet."""

from pathlib import Path
from typing import Any


class HelmletError(Exception):
    """Base exception for all helmlet errors."""

    pass


class ConfigError(HelmletError):
    """Base exception for settings file errors."""

    pass


class DuplicateConfigError(ConfigError):
    """Raised when conflicting settings files exist at the same level.

    For example, if both `helmlet.toml` and `.helmlet/config.toml` exist in
    the same project directory.
    """

    def __init__(self, files: list[str]) -> None:
        self.files = files
        super().__init__(
            f"Conflicting config files found: {', '.join(files)}. "
            "Only one should exist."
        )


class ConfigFileNotFoundError(ConfigError):
    """Raised when an explicitly specified settings file is not found."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class ValuesError(HelmletError):
    """Base exception for values loading and merging errors."""

    pass


class ValuesFileNotFoundError(ValuesError):
    """Raised when a values file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"reading file {path}: no such file")


class ValuesParseError(ValuesError):
    """Raised when a values file is not a YAML mapping."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"parsing YAML from {path}: {reason}")


class TypeConflictError(ValuesError):
    """Raised under the strict conflict policy when a mapping would be
    replaced by a non-mapping value, or the other way round.
    """

    def __init__(self, path: list[str], existing: Any, new: Any) -> None:
        self.path = path
        self.existing = existing
        self.new = new
        super().__init__(
            f"type conflict at {'.'.join(path)}: "
            f"cannot replace {type(existing).__name__} with {type(new).__name__}"
        )


class TemplateRenderError(HelmletError):
    """Raised when a template cannot be read, parsed or executed."""

    def __init__(self, path: Path, stage: str, cause: Exception) -> None:
        self.path = path
        self.stage = stage
        self.cause = cause
        super().__init__(f"Error {stage} template {path}: {cause}")
