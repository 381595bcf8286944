"""Deep merge for value trees."""

from collections.abc import Mapping
from typing import Any

from helmlet.exceptions import TypeConflictError
from helmlet.values.tree import (
    ConflictPolicy,
    NodeKind,
    ValueTree,
    classify,
    coerce_mapping,
    copy_tree,
    is_type_conflict,
    native,
    new_root,
)


def _string_keyed(mapping: Mapping[Any, Any]) -> Mapping[str, Any]:
    if classify(mapping) is NodeKind.MAPPING:
        return mapping
    return coerce_mapping(mapping)


def check_conflicts(
    dest: Mapping[Any, Any],
    src: Mapping[Any, Any],
    _path: list[str] | None = None,
) -> None:
    """Raise if merging `src` into `dest` would change a node's mapping-ness.

    Nothing is modified, so a strict merge can fail before writing anything.

    Raises:
        TypeConflictError: On the first conflicting key.
    """
    path = _path or []
    existing_items = _string_keyed(dest)

    for key, src_value in _string_keyed(src).items():
        if key not in existing_items:
            continue
        existing = existing_items[key]
        if classify(existing).is_mapping and classify(src_value).is_mapping:
            check_conflicts(existing, src_value, [*path, key])
        elif is_type_conflict(existing, src_value):
            raise TypeConflictError([*path, key], existing, src_value)


def _merge(dest: ValueTree, src: Mapping[Any, Any]) -> None:
    for key, src_value in _string_keyed(src).items():
        existing = dest.get(key)
        if (
            key in dest
            and classify(existing).is_mapping
            and classify(src_value).is_mapping
        ):
            child = native(existing)
            dest[key] = child
            _merge(child, src_value)
        else:
            # src wins, including lists (no concatenation)
            dest[key] = copy_tree(src_value)


def merge(
    dest: ValueTree,
    src: Mapping[Any, Any],
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> None:
    """Deep merge `src` into `dest` in place.

    For keys holding a mapping on both sides, the merge is recursive. For
    all other types (including lists), the `src` value replaces the `dest`
    value entirely, even when that changes the node's type.

    `src` is left untouched: replacement values are copied node by node, so
    nothing in `dest` aliases a source document or another path in `dest`.

    Args:
        dest: The mapping to merge into. Mutated.
        src: The mapping whose values take precedence.
        policy: Conflict policy. Under STRICT, replacing a mapping with a
            non-mapping (or the other way round) raises and leaves `dest`
            unchanged.

    Raises:
        TypeConflictError: Only under ConflictPolicy.STRICT.

    Examples:
        >>> tree = {"a": {"y": 2}}
        >>> merge(tree, {"a": {"x": 1}})
        >>> tree
        {'a': {'y': 2, 'x': 1}}

        >>> tree = {"a": {"x": 1}}
        >>> merge(tree, {"a": 5})
        >>> tree
        {'a': 5}
    """
    if policy is ConflictPolicy.STRICT:
        check_conflicts(dest, src)
    _merge(dest, src)


def merged(
    *sources: Mapping[Any, Any],
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> ValueTree:
    """Fold sources into a fresh root, lowest priority first.

    Examples:
        >>> merged({"a": 1, "b": 1}, {"b": 2})
        {'a': 1, 'b': 2}
    """
    root = new_root()
    for source in sources:
        merge(root, source, policy)
    return root
