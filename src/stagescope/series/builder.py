"""
Per-host series building.

Turns raw samples into one time-ordered point list per canonical host for a
selected metric path, backfills a lead-in point so series start at job
submission, and annotates each point with its nearest job and stage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase

from stagescope.config import ViewerSettings, get_settings
from stagescope.exceptions import MissingMetricError
from stagescope.models import HostSeries, MetricSample, TimedPoint, walk
from stagescope.series.hosts import HostGrouper, HostIdentity, metric_namespace, resolve_host
from stagescope.series.markers import MarkerIndex

logger = logging.getLogger(__name__)

__all__ = ["backfill", "build_series", "collect_points", "is_cumulative", "resolve_value"]


@dataclass
class RawPoint:
    """A point before marker annotation."""

    timestamp_millis: int | float
    value: float
    identity: HostIdentity
    synthetic: bool = False


def resolve_value(sample: MetricSample, metric_path: str) -> float:
    """Numeric value of ``metric_path`` in a sample.

    Raises:
        MissingMetricError: If the path is absent or its value is not numeric.
    """
    scalar = walk(sample.values, metric_path)
    try:
        return scalar.as_float()
    except ValueError:
        raise MissingMetricError(metric_path, f"value {scalar.value!r} is not numeric") from None


def is_cumulative(metric_path: str, patterns: Sequence[str]) -> bool:
    """Whether a metric path is a cumulative counter whose lead-in value is zero."""
    return any(fnmatchcase(metric_path, pattern) for pattern in patterns)


def collect_points(
    samples: Iterable[MetricSample],
    metric_path: str,
    settings: ViewerSettings | None = None,
) -> dict[str, list[RawPoint]]:
    """Group the values of ``metric_path`` by canonical host.

    Hosts are keyed in discovery order. Samples missing the metric are
    omitted; samples of a closed host are dropped in contiguous grouping.
    Each host's points are stably sorted by time.
    """
    settings = settings or get_settings()
    namespace = metric_namespace(metric_path)
    grouper = HostGrouper(mode=settings.host_grouping)

    points: dict[str, list[RawPoint]] = {}
    missing = 0
    dropped = 0

    for sample in samples:
        identity = resolve_host(sample.host, namespace, settings.system_namespace)
        if not grouper.accept(identity.canonical):
            dropped += 1
            continue

        try:
            value = resolve_value(sample, metric_path)
        except MissingMetricError as e:
            missing += 1
            logger.debug(f"Omitting point of {sample.host} at {sample.timestamp}: {e}")
            continue

        points.setdefault(identity.canonical, []).append(RawPoint(sample.timestamp_millis, value, identity))

    if missing or dropped:
        logger.debug(f"Series for {metric_path}: {missing} point(s) missing, {dropped} sample(s) of closed hosts dropped")

    for host_points in points.values():
        host_points.sort(key=lambda point: point.timestamp_millis)

    return points


def backfill(
    points: dict[str, list[RawPoint]],
    earliest_marker: float | None,
    lead_in_ms: int,
    zero_fill: bool = False,
) -> bool:
    """Prepend a lead-in point to every host when markers precede the data.

    The lead-in point sits ``lead_in_ms`` before the earliest marker and
    repeats the host's first value, or is zero for cumulative counters.

    Returns:
        True if lead-in points were added
    """
    if earliest_marker is None or not points:
        return False

    earliest_sample = min(host_points[0].timestamp_millis for host_points in points.values())
    if earliest_marker >= earliest_sample:
        return False

    lead_in_time = earliest_marker - lead_in_ms
    for host_points in points.values():
        first = host_points[0]
        value = 0.0 if zero_fill else first.value
        host_points.insert(0, RawPoint(lead_in_time, value, first.identity, synthetic=True))
    return True


def build_series(
    samples: Iterable[MetricSample],
    metric_path: str,
    stage_times: Sequence[int | float] = (),
    job_times: Sequence[int | float] = (),
    settings: ViewerSettings | None = None,
) -> list[HostSeries]:
    """Build annotated per-host series for one metric path.

    Args:
        samples: Raw samples in arrival order
        metric_path: Dot-joined metric path to plot
        stage_times: Stage submission times (UNIX ms) in arrival order
        job_times: Job submission times (UNIX ms) in arrival order
        settings: Viewer settings, defaults to the environment settings

    Returns:
        One HostSeries per canonical host, in discovery order
    """
    settings = settings or get_settings()
    points = collect_points(samples, metric_path, settings)

    stages = MarkerIndex(stage_times)
    jobs = MarkerIndex(job_times)
    marker_starts = [start for start in (stages.earliest, jobs.earliest) if start is not None]
    earliest_marker = min(marker_starts) if marker_starts else None

    backfill(
        points,
        earliest_marker,
        settings.lead_in_ms,
        zero_fill=is_cumulative(metric_path, settings.cumulative_patterns),
    )

    series: list[HostSeries] = []
    for host, host_points in points.items():
        timed = [
            TimedPoint(
                timestamp_millis=point.timestamp_millis,
                value=point.value,
                host_label=point.identity.raw,
                executor_id=point.identity.executor_id,
                nearest_stage_index=stages.nearest(point.timestamp_millis),
                nearest_job_index=jobs.nearest(point.timestamp_millis),
                synthetic=point.synthetic,
            )
            for point in host_points
        ]
        series.append(HostSeries(host=host, points=timed))
    return series
