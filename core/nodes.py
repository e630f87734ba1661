"""
Document tree model for IndexDrift.

Parsed JSON documents are converted into a closed set of node variants
(object, array, scalar) before comparison. The conversion is the only
place where structural problems (cycles, unsupported types, runaway
nesting) are detected, so the differ itself never has to fail.
"""
from typing import Any, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import json
import math


class NodeKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


class NodeStructureError(ValueError):
    """Raised when plain data cannot be represented as a document tree."""


@dataclass(frozen=True)
class ObjectNode:
    """Mapping of string keys to nodes. Key order carries no meaning."""
    members: dict = field(default_factory=dict)

    kind = NodeKind.OBJECT

    # members is a dict, so object nodes cannot be hashed
    __hash__ = None

    def keys(self) -> set:
        return set(self.members)

    def __contains__(self, key: str) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> "Node":
        return self.members[key]

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ArrayNode:
    """Ordered sequence of nodes."""
    items: tuple = ()

    kind = NodeKind.ARRAY

    def __getitem__(self, index: int) -> "Node":
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class ScalarNode:
    """Leaf value: str, int, float, bool or None."""
    value: Any = None

    kind = NodeKind.SCALAR


Node = Union[ObjectNode, ArrayNode, ScalarNode]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def from_python(value: Any, max_depth: Optional[int] = None) -> Node:
    """
    Convert a parsed JSON value into a document tree.

    Args:
        value: dicts, lists/tuples and JSON scalars, as produced by json.load
        max_depth: Maximum nesting depth allowed (None for unbounded)

    Raises:
        NodeStructureError: on cycles, non-string keys, unsupported types or
            nesting deeper than max_depth
    """
    return _convert(value, depth=0, max_depth=max_depth, active=set())


def _convert(value: Any, depth: int, max_depth: Optional[int], active: set) -> Node:
    if max_depth is not None and depth > max_depth:
        raise NodeStructureError(f"Document nesting exceeds maximum depth of {max_depth}")

    if isinstance(value, _SCALAR_TYPES):
        return ScalarNode(value)

    if not isinstance(value, (dict, list, tuple)):
        raise NodeStructureError(f"Unsupported value type: {type(value).__name__}")

    marker = id(value)
    if marker in active:
        raise NodeStructureError("Document contains a reference cycle")

    active.add(marker)
    try:
        if isinstance(value, dict):
            members = {}
            for key, child in value.items():
                if not isinstance(key, str):
                    raise NodeStructureError(f"Object keys must be strings, got {type(key).__name__}")
                members[key] = _convert(child, depth + 1, max_depth, active)
            return ObjectNode(members)

        return ArrayNode(tuple(_convert(child, depth + 1, max_depth, active) for child in value))
    finally:
        active.discard(marker)


def to_python(node: Node) -> Any:
    """Convert a document tree back into plain dicts, lists and scalars."""
    if isinstance(node, ObjectNode):
        return {key: to_python(child) for key, child in node.members.items()}
    if isinstance(node, ArrayNode):
        return [to_python(child) for child in node.items]
    return node.value


def scalars_equal(left: Any, right: Any) -> bool:
    """
    Deep equality for leaf values.

    Booleans only equal booleans (Python would otherwise treat True == 1),
    numbers compare numerically and NaN equals NaN.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        if isinstance(left, float) and isinstance(right, float):
            if math.isnan(left) and math.isnan(right):
                return True
        return left == right

    return type(left) is type(right) and left == right


def canonical_json(node: Node) -> str:
    """Compact JSON with sorted keys. Stable across key order of the input."""
    return json.dumps(to_python(node), sort_keys=True, separators=(',', ':'), ensure_ascii=False)


def format_node_compact(node: Node) -> str:
    """Format a node for display: strings as raw text, everything else as compact JSON."""
    if isinstance(node, ScalarNode) and isinstance(node.value, str):
        return node.value
    return canonical_json(node)
