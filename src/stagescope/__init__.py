"""
Stagescope - Executor metrics charts aligned with the job and stage timeline.

Examples:
    >>> from stagescope import BatchPresenter, parse_samples
    >>> presenter = BatchPresenter(parse_samples(raw_samples), stages=stages, jobs=jobs)
    >>> presenter.metric_paths
    ['sigar.cpu.combined', 'sigar.mem.used']
    >>> payload = presenter.render("sigar.cpu.combined")
"""

from stagescope.models import ChartPayload, MetricSample, TimelineEvent, parse_sample, parse_samples
from stagescope.presenter import BatchPresenter, LivePresenter
from stagescope.series import build_series, discover_metric_paths, nearest_marker_index, resolve_host

__version__ = "0.1.0"
__all__ = [
    "BatchPresenter",
    "ChartPayload",
    "LivePresenter",
    "MetricSample",
    "TimelineEvent",
    "build_series",
    "discover_metric_paths",
    "nearest_marker_index",
    "parse_sample",
    "parse_samples",
    "resolve_host",
]
