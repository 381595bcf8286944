"""Value tree package for helmlet.

This package builds the data context templates are rendered against:
YAML values files deep-merged in order, then dotted-path overrides.
"""

from helmlet.values.loader import build_values, load_values, load_values_file
from helmlet.values.merge import check_conflicts, merge, merged
from helmlet.values.overrides import (
    apply_overrides,
    parse_set_values,
    set_path,
    split_path,
)
from helmlet.values.tree import (
    ConflictPolicy,
    NodeKind,
    ValueTree,
    classify,
    coerce_mapping,
    copy_tree,
    new_root,
)

__all__ = [
    # Tree model
    "ConflictPolicy",
    "NodeKind",
    "ValueTree",
    "classify",
    "coerce_mapping",
    "copy_tree",
    "new_root",
    # Merge
    "check_conflicts",
    "merge",
    "merged",
    # Overrides
    "apply_overrides",
    "parse_set_values",
    "set_path",
    "split_path",
    # Loading
    "build_values",
    "load_values",
    "load_values_file",
]
