"""Pytest fixtures for helmlet tests."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from helmlet.config import clear_config_context


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point user config discovery away from the real home directory."""
    monkeypatch.setenv("HELMLET_CONFIG_HOME", str(tmp_path / "no-user-config"))


@pytest.fixture(autouse=True)
def reset_state() -> Iterator[None]:
    """Clear settings context and CLI logging setup around each test."""
    clear_config_context()
    yield
    clear_config_context()
    logger = logging.getLogger("helmlet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide a temporary project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def mock_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Provide a mock home directory and set HOME env var."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove helmlet settings environment variables."""
    env_vars = [
        "XDG_CONFIG_HOME",
        "HELMLET_DELIMITER",
        "HELMLET_STRICT",
        "HELMLET_CONFLICT_POLICY",
        "HELMLET_TEMPLATE_SUFFIXES",
        "HELMLET_LOG_LEVEL",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, clean_env: None
) -> Path:
    """Provide a mock HELMLET_CONFIG_HOME directory.

    Depends on clean_env to ensure env is clean before setting HELMLET_CONFIG_HOME.
    """
    config = tmp_path / "helmlet-config"
    config.mkdir()
    monkeypatch.setenv("HELMLET_CONFIG_HOME", str(config))
    return config


@pytest.fixture
def write_yaml(tmp_path: Path):
    """Write a YAML values file under tmp_path and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
