"""Value model — the nested trees a complex cell holds.

A node is one of three kinds:

- MAPPING: any Mapping with string keys (stored as dict after a copy)
- SEQUENCE: a list or a tuple
- SCALAR: anything else, including str, bytes and None

Trees are plain Python containers. kind_of() is the single place that
decides which kind a node is; every traversal branches on its result.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any


class NodeKind(enum.Enum):
    SCALAR = "scalar"
    MAPPING = "mapping"
    SEQUENCE = "sequence"


def kind_of(node: Any) -> NodeKind:
    """Classify a node."""
    if isinstance(node, Mapping):
        return NodeKind.MAPPING
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality across nested mappings and sequences.

    A list and a tuple with equal items compare equal. Nodes of different
    kinds never do, so {"a": 1} is not equal to [("a", 1)].
    """
    if a is b:
        return True
    kind = kind_of(a)
    if kind is not kind_of(b):
        return False
    if kind is NodeKind.MAPPING:
        if len(a) != len(b):
            return False
        for key, value in a.items():
            if key not in b or not deep_equal(value, b[key]):
                return False
        return True
    if kind is NodeKind.SEQUENCE:
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))
    if kind is NodeKind.SCALAR:
        return bool(a == b)
    raise AssertionError(f"unhandled node kind: {kind}")


def deep_copy(node: Any) -> Any:
    """Copy every container in the tree. Scalars are shared."""
    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        return {key: deep_copy(value) for key, value in node.items()}
    if kind is NodeKind.SEQUENCE:
        items = [deep_copy(item) for item in node]
        return tuple(items) if isinstance(node, tuple) else items
    if kind is NodeKind.SCALAR:
        return node
    raise AssertionError(f"unhandled node kind: {kind}")
