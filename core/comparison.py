"""
IndexDrift Comparison Engine

Compares a locally authored index definition against the remote snapshot
and produces a path-addressed change report.

Objects are compared key by key in sorted order, arrays strictly by
position, and everything else by value. The resulting sequence of changes
depends only on the two input trees.
"""
from typing import Any, Optional
from dataclasses import dataclass, field
from enum import Enum
import hashlib
import logging

from core.nodes import (
    Node,
    ObjectNode,
    ArrayNode,
    ScalarNode,
    from_python,
    canonical_json,
    format_node_compact,
    scalars_equal,
)

logger = logging.getLogger(__name__)

MISSING_MESSAGE = "resource does not exist remotely"
DIFFERENCES_MESSAGE = "Found differences between local and remote definitions:"
IDENTICAL_MESSAGE = "Definitions are identical"


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class Change:
    """
    A single difference between the local and remote trees.

    Added/Removed carry the text of the side where the value is present
    in `value`. Changed carries the remote text in `from_value` and the
    local text in `to_value`.
    """
    change_type: ChangeType
    path: str
    value: Optional[str] = None
    from_value: Optional[str] = None
    to_value: Optional[str] = None

    def lines(self) -> list[str]:
        """Render as report lines."""
        if self.change_type == ChangeType.CHANGED:
            return [
                f"Changed {self.path}:",
                f"  From: {self.from_value}",
                f"  To:   {self.to_value}",
            ]
        label = "Added" if self.change_type == ChangeType.ADDED else "Removed"
        return [f"{label} {self.path}: {self.value}"]

    def to_dict(self) -> dict:
        result = {
            "path": self.path,
            "change_type": self.change_type.value,
        }
        if self.change_type == ChangeType.CHANGED:
            result["from"] = self.from_value
            result["to"] = self.to_value
        else:
            result["value"] = self.value
        return result


@dataclass
class ChangeReport:
    """Result of comparing a local definition with its remote counterpart."""
    exists: bool
    message: str
    differences: list[Change] = field(default_factory=list)
    local_hash: str = ""
    remote_hash: str = ""

    @property
    def has_differences(self) -> bool:
        return len(self.differences) > 0

    @property
    def change_count(self) -> int:
        return len(self.differences)

    def lines(self) -> list[str]:
        lines = []
        for change in self.differences:
            lines.extend(change.lines())
        return lines

    def fingerprint(self) -> str:
        """SHA-256 over the rendered report. Equal reports share a fingerprint."""
        parts = [str(self.exists).lower(), self.message, *self.lines()]
        return hashlib.sha256("\n".join(parts).encode("utf-8", "surrogatepass")).hexdigest()

    def to_dict(self) -> dict:
        return {
            "exists": self.exists,
            "has_differences": self.has_differences,
            "change_count": self.change_count,
            "message": self.message,
            "local_hash": self.local_hash,
            "remote_hash": self.remote_hash,
            "fingerprint": self.fingerprint(),
            "changes": [c.to_dict() for c in self.differences],
        }


class _Path:
    """
    Path accumulated as a stack of segments during traversal.

    Segments are only joined when a change is emitted.
    """

    def __init__(self):
        self._segments: list[str] = []

    def push_key(self, key: str):
        # Keys are not escaped, so "/" or "[" inside a key can render like a nested path
        self._segments.append(f"/{key}" if self._segments else key)

    def push_index(self, index: int):
        self._segments.append(f"[{index}]")

    def pop(self):
        self._segments.pop()

    def render(self) -> str:
        return "".join(self._segments)


def _compare(local: Node, remote: Node, path: _Path, changes: list[Change]):
    """Dispatch on the variant pair. Mismatched variants and unequal scalars are a single Changed."""
    if isinstance(local, ObjectNode) and isinstance(remote, ObjectNode):
        _compare_objects(local, remote, path, changes)
    elif isinstance(local, ArrayNode) and isinstance(remote, ArrayNode):
        _compare_arrays(local, remote, path, changes)
    elif not _nodes_equal(local, remote):
        changes.append(Change(
            change_type=ChangeType.CHANGED,
            path=path.render(),
            from_value=format_node_compact(remote),
            to_value=format_node_compact(local)
        ))


def _nodes_equal(local: Node, remote: Node) -> bool:
    # Only reached for scalar pairs or mismatched variants
    if isinstance(local, ScalarNode) and isinstance(remote, ScalarNode):
        return scalars_equal(local.value, remote.value)
    return False


def _compare_objects(local: ObjectNode, remote: ObjectNode, path: _Path, changes: list[Change]):
    """Walk the union of keys in sorted order; one-sided keys become Added or Removed."""
    all_keys = sorted(local.keys() | remote.keys())

    for key in all_keys:
        path.push_key(key)
        if key not in remote:
            changes.append(Change(
                change_type=ChangeType.ADDED,
                path=path.render(),
                value=format_node_compact(local[key])
            ))
        elif key not in local:
            changes.append(Change(
                change_type=ChangeType.REMOVED,
                path=path.render(),
                value=format_node_compact(remote[key])
            ))
        else:
            _compare(local[key], remote[key], path, changes)
        path.pop()


def _compare_arrays(local: ArrayNode, remote: ArrayNode, path: _Path, changes: list[Change]):
    """
    Compare elements pairwise by index.

    Extra remote elements are reported as Removed, then extra local
    elements as Added, each in ascending index order.
    """
    min_length = min(len(local), len(remote))

    for i in range(min_length):
        path.push_index(i)
        _compare(local[i], remote[i], path, changes)
        path.pop()

    # Trailing remote elements were dropped locally
    for i in range(min_length, len(remote)):
        path.push_index(i)
        changes.append(Change(
            change_type=ChangeType.REMOVED,
            path=path.render(),
            value=format_node_compact(remote[i])
        ))
        path.pop()

    for i in range(min_length, len(local)):
        path.push_index(i)
        changes.append(Change(
            change_type=ChangeType.ADDED,
            path=path.render(),
            value=format_node_compact(local[i])
        ))
        path.pop()


def deep_compare(local: Node, remote: Node) -> list[Change]:
    """
    Recursively compare two trees and return all differences in traversal order.

    Args:
        local: The locally authored tree
        remote: The remote snapshot tree

    Returns:
        Changes ordered by sorted object keys and ascending array index
    """
    changes: list[Change] = []
    _compare(local, remote, _Path(), changes)
    return changes


def compute_node_hash(node: Node) -> str:
    """
    SHA-256 of a tree's canonical JSON.
    Trees with the same hash are structurally identical.
    """
    return hashlib.sha256(canonical_json(node).encode("utf-8", "surrogatepass")).hexdigest()


def diff(local: Node, remote: Optional[Node]) -> ChangeReport:
    """
    Compare a local tree with the remote snapshot.

    A missing remote is reported with exists=False and no differences;
    no comparison is attempted in that case.
    """
    if remote is None:
        return ChangeReport(exists=False, message=MISSING_MESSAGE)

    differences = deep_compare(local, remote)
    logger.debug(f"Comparison produced {len(differences)} difference(s)")

    return ChangeReport(
        exists=True,
        message=DIFFERENCES_MESSAGE if differences else IDENTICAL_MESSAGE,
        differences=differences,
        local_hash=compute_node_hash(local),
        remote_hash=compute_node_hash(remote)
    )


def compare_documents(local_doc: Any, remote_doc: Any = None, max_depth: Optional[int] = None) -> ChangeReport:
    """
    Main entry point for comparing two parsed JSON documents.

    Args:
        local_doc: The local definition (dict, list or scalar)
        remote_doc: The remote definition, or None when it does not exist
        max_depth: Nesting bound applied while building the trees

    Returns:
        ChangeReport with all detected differences
    """
    local = from_python(local_doc, max_depth=max_depth)
    if remote_doc is None:
        return diff(local, None)

    remote = from_python(remote_doc, max_depth=max_depth)

    local_hash = compute_node_hash(local)
    remote_hash = compute_node_hash(remote)

    # Quick check - matching hashes mean identical trees
    if local_hash == remote_hash:
        return ChangeReport(
            exists=True,
            message=IDENTICAL_MESSAGE,
            local_hash=local_hash,
            remote_hash=remote_hash
        )

    return diff(local, remote)
