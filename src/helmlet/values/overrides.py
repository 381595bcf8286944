"""Command-line overrides: ``--set a.b=1,c=2``.

Override strings are parsed into ``(dotted_key, value)`` pairs, and each
pair is written into the value tree along its dotted path.
"""

import logging
import shlex
from collections.abc import Iterable, Sequence
from typing import Any

from helmlet.exceptions import TypeConflictError
from helmlet.values.tree import (
    ConflictPolicy,
    NodeKind,
    ValueTree,
    classify,
    coerce_mapping,
    is_type_conflict,
)

logger = logging.getLogger(__name__)


def split_path(key: str) -> list[str]:
    """Split a dotted key into path segments.

    Examples:
        >>> split_path("a.b.c")
        ['a', 'b', 'c']
    """
    return key.split(".")


def set_path(
    root: ValueTree,
    path: Sequence[str],
    value: Any,
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> None:
    """Set `value` at `path` inside `root`, creating mappings on the way.

    Intermediate nodes are repaired as needed:

    - missing or null: a new empty mapping is created
    - a mapping with non-string keys (or not a dict at all): replaced by a
      string-keyed copy holding the same entries
    - a scalar or a sequence: discarded and replaced by an empty mapping

    The last segment is always overwritten, even if it held a whole subtree.

    Args:
        root: The tree to modify in place.
        path: Path segments, at least one.
        value: The value to store.
        policy: Under ConflictPolicy.STRICT, discarding a scalar/sequence or
            replacing a mapping with a scalar raises instead.

    Raises:
        ValueError: If `path` is empty.
        TypeConflictError: Only under ConflictPolicy.STRICT.

    Examples:
        >>> tree = {"a": 5}
        >>> set_path(tree, ["a", "b"], "v")
        >>> tree
        {'a': {'b': 'v'}}
    """
    if not path:
        raise ValueError("path must contain at least one segment")

    # Repaired parents are attached only once the whole path is known to be
    # writable, so a strict failure leaves `root` untouched.
    repairs: list[tuple[ValueTree, str, ValueTree]] = []
    node = root
    for depth, key in enumerate(path[:-1]):
        child = node.get(key)
        kind = classify(child)

        if child is None:
            child = {}
        elif kind is NodeKind.FOREIGN_MAPPING:
            child = coerce_mapping(child)
        elif not kind.is_mapping:
            if policy is ConflictPolicy.STRICT:
                raise TypeConflictError(list(path[: depth + 1]), child, {})
            child = {}

        if child is not node.get(key):
            repairs.append((node, key, child))
        node = child

    last = path[-1]
    if (
        policy is ConflictPolicy.STRICT
        and last in node
        and is_type_conflict(node[last], value)
    ):
        raise TypeConflictError(list(path), node[last], value)

    for parent, key, child in repairs:
        parent[key] = child
    node[last] = value


def apply_overrides(
    root: ValueTree,
    pairs: Iterable[tuple[str, Any]],
    policy: ConflictPolicy = ConflictPolicy.OVERRIDE,
) -> None:
    """Apply ``(dotted_key, value)`` pairs in order; later pairs win."""
    for key, value in pairs:
        logger.debug("Setting %s=%r", key, value)
        set_path(root, split_path(key), value, policy)


def _split_fields(text: str) -> list[str]:
    """Split on top-level commas and newlines, honouring double quotes.

    Quotes may open anywhere in a field and are removed, so ``a="x,y"``
    becomes ``a=x,y``. Backslashes are kept literally.

    Raises:
        ValueError: On an unbalanced quote.
    """
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace = ",\r\n"
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.quotes = '"'
    lexer.escape = ""
    return list(lexer)


def _to_pairs(fields: Iterable[str]) -> list[tuple[str, str]]:
    pairs = []
    for field in fields:
        key, sep, value = field.partition("=")
        if sep:
            pairs.append((key, value))
    return pairs


def parse_set_values(text: str) -> list[tuple[str, str]]:
    """Parse a ``key1=val1,key2=val2`` string into pairs.

    Values are kept as strings. Fields without ``=`` are dropped. If the
    quoting is malformed, falls back to splitting on every comma so that a
    best-effort result is still produced.

    Examples:
        >>> parse_set_values("a.b=1,c=2")
        [('a.b', '1'), ('c', '2')]

        >>> parse_set_values('a="x,y",b=2')
        [('a', 'x,y'), ('b', '2')]
    """
    if not text:
        return []

    try:
        fields = _split_fields(text)
    except ValueError as e:
        logger.debug("Falling back to plain comma split for %r: %s", text, e)
        fields = text.split(",")

    return _to_pairs(fields)
