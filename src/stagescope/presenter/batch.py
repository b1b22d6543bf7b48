"""
Batch presenter.

Builds a complete chart payload from a static collection of samples and the
job/stage timeline. Used for finished applications and for every re-render
of the live presenter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from stagescope.config import ViewerSettings, get_settings
from stagescope.models import ChartPayload, MetricSample, TimelineEvent, TimelineMarker, parse_samples
from stagescope.series import build_series, discover_metric_paths

from .colors import ColorCache

logger = logging.getLogger(__name__)

__all__ = ["BatchPresenter", "build_chart_payload", "build_markers"]


def build_markers(stages: Iterable[TimelineEvent] = (), jobs: Iterable[TimelineEvent] = ()) -> list[TimelineMarker]:
    """Chart markers for stage and job submissions, stages first, each in arrival order."""
    markers = [TimelineMarker(timestamp_millis=stage.submitted, label=stage.name or None, kind="stage") for stage in stages]
    markers.extend(TimelineMarker(timestamp_millis=job.submitted, label=job.name or None, kind="job") for job in jobs)
    return markers


def build_chart_payload(
    samples: Iterable[MetricSample],
    metric_path: str | None,
    stages: Sequence[TimelineEvent] = (),
    jobs: Sequence[TimelineEvent] = (),
    tooltips: Mapping[str, str] | None = None,
    colors: ColorCache | None = None,
    settings: ViewerSettings | None = None,
) -> ChartPayload:
    """Build the chart payload of one metric path.

    Args:
        samples: Samples in arrival order
        metric_path: Selected metric path, or None for an empty chart
        stages: Stage submissions in arrival order
        jobs: Job submissions in arrival order
        tooltips: Optional metric path -> description mapping
        colors: Color cache to assign host colors from; a fresh one if omitted
        settings: Viewer settings, defaults to the environment settings

    Returns:
        ChartPayload whose series, legend and colors line up index by index
    """
    if not metric_path:
        return ChartPayload.empty()

    colors = colors if colors is not None else ColorCache()
    series = build_series(
        samples,
        metric_path,
        stage_times=[stage.submitted for stage in stages],
        job_times=[job.submitted for job in jobs],
        settings=settings or get_settings(),
    )
    legend = [host_series.host for host_series in series]

    return ChartPayload(
        metric_path=metric_path,
        title=metric_path,
        description=tooltips.get(metric_path) if tooltips else None,
        series=[host_series.points for host_series in series],
        legend=legend,
        colors=colors.colors_for(legend),
        markers=build_markers(stages, jobs),
    )


class BatchPresenter:
    """Renders charts of a fixed sample collection.

    Schema discovery runs once, on the first sample; each render is
    otherwise independent of the previous one.
    """

    def __init__(
        self,
        samples: Sequence[MetricSample],
        stages: Sequence[TimelineEvent] = (),
        jobs: Sequence[TimelineEvent] = (),
        tooltips: Mapping[str, str] | None = None,
        settings: ViewerSettings | None = None,
    ) -> None:
        self.samples = list(samples)
        self.stages = list(stages)
        self.jobs = list(jobs)
        self.tooltips = dict(tooltips or {})
        self.settings = settings or get_settings()
        self.colors = ColorCache()
        self._metric_paths: list[str] | None = None

    @classmethod
    def from_raw(
        cls,
        raw_samples: Iterable[Any],
        stages: Sequence[TimelineEvent] = (),
        jobs: Sequence[TimelineEvent] = (),
        tooltips: Mapping[str, str] | None = None,
        settings: ViewerSettings | None = None,
    ) -> BatchPresenter:
        """Create a presenter from undecoded samples, skipping malformed ones."""
        return cls(parse_samples(raw_samples), stages=stages, jobs=jobs, tooltips=tooltips, settings=settings)

    @property
    def metric_paths(self) -> list[str]:
        """Sorted selectable metric paths, discovered from the first sample."""
        if self._metric_paths is None:
            self._metric_paths = discover_metric_paths(self.samples[0].values) if self.samples else []
        return self._metric_paths

    def render(self, metric_path: str | None) -> ChartPayload:
        """Build the payload of the selected metric path (None clears the chart)."""
        payload = build_chart_payload(
            self.samples,
            metric_path,
            stages=self.stages,
            jobs=self.jobs,
            tooltips=self.tooltips,
            colors=self.colors,
            settings=self.settings,
        )
        logger.debug(f"Rendered {metric_path}: {len(payload.legend)} host(s), {len(self.samples)} sample(s)")
        return payload
