"""Loading values files and building the value tree.

Values files are YAML documents whose top level is a mapping. They are
merged in the order given (later files override earlier ones), then any
``--set`` overrides are applied on top.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from helmlet.exceptions import ValuesFileNotFoundError, ValuesParseError
from helmlet.values.merge import merge
from helmlet.values.overrides import apply_overrides, parse_set_values
from helmlet.values.tree import ConflictPolicy, ValueTree, classify, new_root

logger = logging.getLogger(__name__)


def load_values_file(path: Path) -> dict[Any, Any]:
    """Load a YAML values file and return its top-level mapping.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed mapping. An empty document yields an empty dict.

    Raises:
        ValuesFileNotFoundError: If the file doesn't exist.
        ValuesParseError: If the file is not valid YAML, or its top level
            is not a mapping.
    """
    if not path.is_file():
        raise ValuesFileNotFoundError(str(path))

    try:
        with open(path, "rb") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValuesParseError(str(path), str(e)) from e

    if data is None:
        return {}
    if not classify(data).is_mapping:
        raise ValuesParseError(
            str(path), f"top level must be a mapping, got {type(data).__name__}"
        )
    return data


def load_values(
    paths: Iterable[Path],
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> tuple[ValueTree, list[Path]]:
    """Load and merge values files, lowest priority first.

    Args:
        paths: Values files in priority order (last wins).
        policy: Conflict policy for the merges.

    Returns:
        Tuple of (merged_values, list_of_loaded_files).

    Raises:
        ValuesError: On the first file that can't be loaded, or on a type
            conflict under ConflictPolicy.STRICT.
    """
    values = new_root()
    loaded_files: list[Path] = []

    for path in paths:
        merge(values, load_values_file(path), policy)
        loaded_files.append(path)
        logger.debug("Merged values from %s", path)

    return values, loaded_files


def build_values(
    paths: Iterable[Path],
    set_values: Iterable[str] = (),
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> ValueTree:
    """Build the value tree handed to templates.

    All files are merged before any override is applied, so command-line
    overrides win at every depth.

    Args:
        paths: Values files in priority order.
        set_values: Override strings, each ``key1=val1,key2=val2``.
        policy: Conflict policy for merges and overrides.

    Returns:
        The merged value tree.
    """
    values, _ = load_values(paths, policy)

    for text in set_values:
        apply_overrides(values, parse_set_values(text), policy)

    return values
