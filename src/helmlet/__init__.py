"""helmlet - render text templates against layered YAML values."""

__version__ = "0.1.0"

from helmlet.config import HelmletSettings  # noqa: E402
from helmlet.render import Renderer, build_context  # noqa: E402
from helmlet.values import (  # noqa: E402
    ConflictPolicy,
    build_values,
    merge,
    parse_set_values,
    set_path,
)

__all__ = [
    "ConflictPolicy",
    "HelmletSettings",
    "Renderer",
    "build_context",
    "build_values",
    "merge",
    "parse_set_values",
    "set_path",
]
