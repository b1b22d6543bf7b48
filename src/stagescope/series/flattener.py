"""
Metric path discovery.

Walks one representative sample and lists every scalar it can address,
as dot-joined paths for the metric selection menu.
"""

from __future__ import annotations

from dataclasses import dataclass

from stagescope.models.tree import MetricTree, Scalar, join_path, split_path

__all__ = ["FlattenedSchema", "discover_metric_paths", "flatten_schema"]


@dataclass(frozen=True)
class FlattenedSchema:
    """Result of flattening one metric tree.

    Attributes:
        paths: Selectable metric paths, sorted alphabetically.
        superseded: Intermediate prefixes hidden because a deeper path exists.
    """

    paths: list[str]
    superseded: frozenset[str]


def _collect_leaves(tree: MetricTree, prefix: list[str], leaves: set[str]) -> None:
    if isinstance(tree, Scalar):
        if prefix:
            leaves.add(join_path(prefix))
        return
    for key, child in tree.children.items():
        _collect_leaves(child, [*prefix, key], leaves)


def _proper_prefixes(path: str) -> list[str]:
    keys = split_path(path)
    return [join_path(keys[:end]) for end in range(1, len(keys))]


def flatten_schema(tree: MetricTree) -> FlattenedSchema:
    """Flatten a metric tree into selectable paths.

    Candidate paths are collected first; any candidate that is a strict
    dot-prefix of another candidate is then dropped, so deeper paths always
    win regardless of traversal order.
    """
    leaves: set[str] = set()
    _collect_leaves(tree, [], leaves)

    prefixes: set[str] = set()
    for leaf in leaves:
        prefixes.update(_proper_prefixes(leaf))

    paths = sorted(leaves - prefixes)
    return FlattenedSchema(paths=paths, superseded=frozenset(prefixes))


def discover_metric_paths(tree: MetricTree) -> list[str]:
    """Return the sorted selectable metric paths of a tree."""
    return flatten_schema(tree).paths
