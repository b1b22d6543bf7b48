"""
Live presenter.

Folds an unbounded stream of samples into the same chart payload the batch
presenter produces, re-deriving it from the whole history on every arrival.
Callbacks are never re-entered, so the session needs no locking.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from stagescope.config import ViewerSettings, get_settings
from stagescope.exceptions import MalformedSampleError
from stagescope.models import ChartPayload, MetricSample, TimelineEvent, parse_sample
from stagescope.series import discover_metric_paths

from .batch import build_chart_payload
from .colors import ColorCache

logger = logging.getLogger(__name__)

__all__ = ["LivePresenter", "LiveSession"]

RenderCallback = Callable[[ChartPayload], None]


@dataclass
class LiveSession:
    """Mutable state of one live view."""

    history: deque[MetricSample]
    metric_path: str | None = None
    metric_paths: list[str] | None = None
    colors: ColorCache = field(default_factory=ColorCache)

    @classmethod
    def create(cls, history_limit: int = 0) -> LiveSession:
        """Create a session keeping at most ``history_limit`` samples (0 for unbounded)."""
        return cls(history=deque(maxlen=history_limit or None))


class LivePresenter:
    """Renders charts of a growing sample history.

    Every payload is returned and, if ``on_render`` is given, also handed to
    it. A metric path change first emits an empty payload so no stale chart
    stays visible, then the payload rebuilt from the history so far.
    """

    def __init__(
        self,
        stages: Sequence[TimelineEvent] = (),
        jobs: Sequence[TimelineEvent] = (),
        tooltips: Mapping[str, str] | None = None,
        settings: ViewerSettings | None = None,
        on_render: RenderCallback | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.stages = list(stages)
        self.jobs = list(jobs)
        self.tooltips = dict(tooltips or {})
        self.on_render = on_render
        self.session = LiveSession.create(self.settings.live_history_limit)

    @property
    def metric_paths(self) -> list[str]:
        """Sorted selectable metric paths, discovered from the first sample."""
        return self.session.metric_paths or []

    @property
    def metric_path(self) -> str | None:
        return self.session.metric_path

    @property
    def history(self) -> list[MetricSample]:
        return list(self.session.history)

    def push(self, sample: MetricSample) -> ChartPayload | None:
        """Append a sample and re-render the selected metric path.

        Returns:
            The new payload, or None while no metric path is selected
        """
        session = self.session
        if session.metric_paths is None:
            session.metric_paths = discover_metric_paths(sample.values)
            logger.info(f"Discovered {len(session.metric_paths)} metric path(s) from {sample.host}")

        session.history.append(sample)
        if session.metric_path is None:
            return None
        return self._emit(self._render())

    def push_message(self, message: str | bytes | Mapping[str, Any]) -> ChartPayload | None:
        """Decode one channel message and push it.

        Malformed messages are logged and skipped.
        """
        try:
            sample = parse_sample(message)
        except MalformedSampleError as e:
            logger.warning(f"Skipping live message: {e}")
            return None
        return self.push(sample)

    def extend(self, samples: Iterable[MetricSample]) -> ChartPayload | None:
        """Push several samples, returning the last payload."""
        payload = None
        for sample in samples:
            payload = self.push(sample)
        return payload

    def select(self, metric_path: str | None) -> ChartPayload:
        """Change the selected metric path.

        Selecting None (or an empty path) clears the chart.
        """
        self._emit(ChartPayload.empty())
        self.session.metric_path = metric_path or None
        if self.session.metric_path is None:
            return ChartPayload.empty()
        return self._emit(self._render())

    def update_timeline(
        self,
        stages: Sequence[TimelineEvent] | None = None,
        jobs: Sequence[TimelineEvent] | None = None,
    ) -> ChartPayload | None:
        """Replace the job/stage timeline and re-render the selected metric path."""
        if stages is not None:
            self.stages = list(stages)
        if jobs is not None:
            self.jobs = list(jobs)
        if self.session.metric_path is None:
            return None
        return self._emit(self._render())

    def _render(self) -> ChartPayload:
        return build_chart_payload(
            self.session.history,
            self.session.metric_path,
            stages=self.stages,
            jobs=self.jobs,
            tooltips=self.tooltips,
            colors=self.session.colors,
            settings=self.settings,
        )

    def _emit(self, payload: ChartPayload) -> ChartPayload:
        if self.on_render is not None:
            self.on_render(payload)
        return payload
