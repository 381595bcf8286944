"""Value tree model.

A value tree is the nested structure that templates see as ``.Values``.
Nodes are plain Python objects:

- scalars: ``str``, ``int``, ``float``, ``bool`` or ``None``
- sequences: ``list`` (tuples are accepted)
- mappings: ``dict`` keyed by ``str``

Merge and override code never inspects node types itself. It asks
:func:`classify` for a :class:`NodeKind` and dispatches on that.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

ValueTree = dict[str, Any]


class NodeKind(Enum):
    """Kind of a node in a value tree."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    # A mapping the engine cannot mutate and walk as-is: either not a dict,
    # or a dict holding non-string keys (e.g. YAML `1: one` or `true: yes`).
    FOREIGN_MAPPING = "foreign_mapping"

    @property
    def is_mapping(self) -> bool:
        return self in (NodeKind.MAPPING, NodeKind.FOREIGN_MAPPING)


class ConflictPolicy(str, Enum):
    """How merges and overrides treat mapping/non-mapping conflicts.

    OVERRIDE lets the newer value win silently. STRICT raises
    :class:`~helmlet.exceptions.TypeConflictError` instead.
    """

    OVERRIDE = "override"
    STRICT = "strict"


def classify(value: Any) -> NodeKind:
    """Return the kind of a value tree node.

    Examples:
        >>> classify({"a": 1})
        <NodeKind.MAPPING: 'mapping'>

        >>> classify({1: "one"})
        <NodeKind.FOREIGN_MAPPING: 'foreign_mapping'>

        >>> classify([1, 2])
        <NodeKind.SEQUENCE: 'sequence'>
    """
    if isinstance(value, dict):
        if all(isinstance(key, str) for key in value):
            return NodeKind.MAPPING
        return NodeKind.FOREIGN_MAPPING
    if isinstance(value, Mapping):
        return NodeKind.FOREIGN_MAPPING
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def stringify_key(key: Any) -> str:
    """Spell a mapping key the way YAML would."""
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def coerce_mapping(mapping: Mapping[Any, Any]) -> ValueTree:
    """Copy a mapping into a plain string-keyed dict.

    Only the top level is copied; nested values are carried over as-is and
    get coerced later, if and when something walks into them.

    Args:
        mapping: Any mapping, typically one with non-string keys.

    Returns:
        A new dict holding every entry of ``mapping`` with stringified keys.
    """
    return {stringify_key(key): value for key, value in mapping.items()}


def copy_tree(value: Any, _ancestors: frozenset[int] = frozenset()) -> Any:
    """Copy a value tree so that no two paths share a node.

    Unlike ``copy.deepcopy`` there is no memo: a subtree reachable twice
    (a YAML anchor and its alias) becomes two independent copies. Mappings
    keep their keys as they are; scalars are returned as-is.

    Raises:
        ValueError: If the value contains itself.
    """
    kind = classify(value)
    if kind is NodeKind.SCALAR:
        return value

    if id(value) in _ancestors:
        raise ValueError("value tree contains a cycle")
    ancestors = _ancestors | {id(value)}

    if kind is NodeKind.SEQUENCE:
        return [copy_tree(item, ancestors) for item in value]
    return {key: copy_tree(item, ancestors) for key, item in value.items()}


def native(value: Any) -> ValueTree:
    """Return ``value`` itself if it is a native mapping, else a coerced copy."""
    if classify(value) is NodeKind.MAPPING:
        return value
    return coerce_mapping(value)


def new_root() -> ValueTree:
    """Create an empty root mapping."""
    return {}


def is_type_conflict(existing: Any, new: Any) -> bool:
    """Whether replacing ``existing`` with ``new`` changes mapping-ness.

    ``None`` never conflicts, so nulls in a values file can always be filled.
    """
    if existing is None or new is None:
        return False
    return classify(existing).is_mapping != classify(new).is_mapping
