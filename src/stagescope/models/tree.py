"""
Tagged representation of a nested metric sample.

A sample's ``values`` is a tree whose leaves are scalars and whose inner
nodes map string keys to subtrees. Collectors do not agree on depth or
branching, so nothing about the shape is assumed beyond that.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

from stagescope.exceptions import MalformedSampleError, MissingMetricError

__all__ = [
    "MetricTree",
    "Node",
    "Scalar",
    "join_path",
    "split_path",
    "tree_from_raw",
    "tree_to_raw",
    "walk",
]

PATH_SEPARATOR = "."

ScalarValue = Union[int, float, str, bool]


class Scalar:
    """A leaf value of a metric tree."""

    __slots__ = ("value",)

    def __init__(self, value: ScalarValue) -> None:
        self.value = value

    def as_float(self) -> float:
        """Return the value as a float.

        Raises:
            ValueError: If the value is a string that is not a number.
        """
        return float(self.value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Scalar) and self.value == other.value

    def __hash__(self) -> int:
        return hash(("scalar", self.value))

    def __repr__(self) -> str:
        return f"Scalar({self.value!r})"


class Node:
    """An inner node of a metric tree."""

    __slots__ = ("children",)

    def __init__(self, children: Mapping[str, MetricTree] | None = None) -> None:
        self.children: dict[str, MetricTree] = dict(children or {})

    def __len__(self) -> int:
        return len(self.children)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and self.children == other.children

    def __repr__(self) -> str:
        return f"Node({self.children!r})"


MetricTree = Union[Scalar, Node]


def split_path(path: str) -> list[str]:
    """Split a dot-joined metric path into its keys."""
    if not path:
        return []
    return path.split(PATH_SEPARATOR)


def join_path(keys: Sequence[str]) -> str:
    """Join metric keys into a dot-joined metric path."""
    return PATH_SEPARATOR.join(keys)


def tree_from_raw(raw: Any) -> MetricTree:
    """Convert decoded JSON into a metric tree.

    Mappings become nodes, lists become nodes keyed by their decimal index,
    and ``None`` children are dropped.

    Raises:
        MalformedSampleError: If a value is neither a mapping, a list nor a scalar.
    """
    if isinstance(raw, Mapping):
        return Node({str(key): tree_from_raw(value) for key, value in raw.items() if value is not None})
    if isinstance(raw, (list, tuple)):
        return Node({str(index): tree_from_raw(value) for index, value in enumerate(raw) if value is not None})
    if isinstance(raw, (bool, int, float, str)):
        return Scalar(raw)
    raise MalformedSampleError(f"Unsupported metric value type: {type(raw).__name__}")


def tree_to_raw(tree: MetricTree) -> Any:
    """Convert a metric tree back into plain JSON-compatible values."""
    if isinstance(tree, Scalar):
        return tree.value
    return {key: tree_to_raw(child) for key, child in tree.children.items()}


def walk(tree: MetricTree, path: str) -> Scalar:
    """Resolve a metric path against a tree.

    Keys that themselves contain dots are matched greedily, so a path
    discovered from such a tree resolves against it.

    Args:
        tree: Root of the metric tree
        path: Dot-joined metric path

    Returns:
        The scalar at the end of the path

    Raises:
        MissingMetricError: If a key is absent, a scalar is reached before
            the path is exhausted, or the path ends on an inner node.
    """
    keys = split_path(path)
    if not keys:
        raise MissingMetricError(path, "empty path")

    current = tree
    position = 0
    while position < len(keys):
        if isinstance(current, Scalar):
            raise MissingMetricError(path, f"value reached at '{join_path(keys[:position])}'")

        for end in range(len(keys), position, -1):
            key = join_path(keys[position:end])
            if key in current.children:
                current = current.children[key]
                position = end
                break
        else:
            raise MissingMetricError(path, f"no key '{keys[position]}'")

    if isinstance(current, Node):
        raise MissingMetricError(path, "path ends at a group of metrics")
    return current
