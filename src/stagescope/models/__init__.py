"""
Stagescope data models package.

This package contains the metric tree, sample records and chart payload models.
"""

from stagescope.models.payload import ChartPayload, HostSeries, TimedPoint, TimelineMarker
from stagescope.models.sample import (
    MetricSample,
    TimelineEvent,
    parse_sample,
    parse_samples,
    parse_timeline_events,
)
from stagescope.models.tree import MetricTree, Node, Scalar, join_path, split_path, tree_from_raw, tree_to_raw, walk

__all__ = [
    "ChartPayload",
    "HostSeries",
    "MetricSample",
    "MetricTree",
    "Node",
    "Scalar",
    "TimedPoint",
    "TimelineEvent",
    "TimelineMarker",
    "join_path",
    "parse_sample",
    "parse_samples",
    "parse_timeline_events",
    "split_path",
    "tree_from_raw",
    "tree_to_raw",
    "walk",
]
