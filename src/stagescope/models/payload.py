"""
Render-ready chart models.

A ChartPayload is handed to the external chart renderer as-is; it is
rebuilt (batch) or re-derived (live) whenever the selection or the sample
history changes.
"""

from typing import Literal

from pydantic import BaseModel, Field

__all__ = ["ChartPayload", "HostSeries", "TimedPoint", "TimelineMarker"]


class TimedPoint(BaseModel):
    """One chart point of a host series."""

    timestamp_millis: int | float
    value: float
    host_label: str = Field(..., description="Raw host string the point was observed on")
    executor_id: str | None = None
    nearest_stage_index: int = 0
    nearest_job_index: int = 0
    synthetic: bool = Field(default=False, description="True for backfilled lead-in points")


class HostSeries(BaseModel):
    """Time-ordered points of one canonical host."""

    host: str
    points: list[TimedPoint] = []


class TimelineMarker(BaseModel):
    """A job or stage submission drawn as a chart annotation."""

    timestamp_millis: int | float
    label: str | None = None
    kind: Literal["job", "stage"] = "stage"


class ChartPayload(BaseModel):
    """Render-ready aggregate for one selected metric path.

    ``series[i]`` holds exactly the points observed for ``legend[i]`` and is
    drawn with ``colors[i]``.
    """

    metric_path: str | None = None
    title: str = ""
    description: str | None = None
    series: list[list[TimedPoint]] = []
    legend: list[str] = []
    colors: list[str] = []
    markers: list[TimelineMarker] = []

    @classmethod
    def empty(cls, metric_path: str | None = None) -> "ChartPayload":
        """Payload that clears the rendered chart."""
        return cls(metric_path=metric_path, title=metric_path or "")

    @property
    def is_empty(self) -> bool:
        return not self.series
