"""
Stagescope series engine.

Metric path discovery, host identity resolution, per-host series building
and nearest-marker alignment.
"""

from .builder import backfill, build_series, collect_points, is_cumulative, resolve_value
from .flattener import FlattenedSchema, discover_metric_paths, flatten_schema
from .hosts import HostGrouper, HostIdentity, metric_namespace, resolve_host, split_host
from .markers import MarkerIndex, nearest_marker_index

__all__ = [
    "FlattenedSchema",
    "HostGrouper",
    "HostIdentity",
    "MarkerIndex",
    "backfill",
    "build_series",
    "collect_points",
    "discover_metric_paths",
    "flatten_schema",
    "is_cumulative",
    "metric_namespace",
    "nearest_marker_index",
    "resolve_host",
    "resolve_value",
    "split_host",
]
