"""
Stagescope core data models for metric samples and timeline events.

A MetricSample is one snapshot of everything a collector reported for one
host+executor at one tick. TimelineEvents are job or stage submissions
supplied by the job tracker.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from stagescope.exceptions import MalformedSampleError
from stagescope.logger import logger
from stagescope.models.tree import Node, tree_from_raw, tree_to_raw


class MetricSample(BaseModel):
    """One raw per-host snapshot.

    ``values`` may arrive as a mapping (live messages) or as a JSON-encoded
    string (historical batches); both are parsed into a metric tree.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    host: str = Field(..., description="Raw host identity, usually '<hostname>_<executorId>'")
    timestamp: int | float = Field(..., description="Sample time as UNIX seconds")
    values: Node = Field(..., description="Nested metric values")

    @field_validator("values", mode="before")
    @classmethod
    def _parse_values(cls, value: Any) -> Node:
        if isinstance(value, Node):
            return value
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"values is not valid JSON: {e}") from e
        if not isinstance(value, Mapping):
            raise ValueError("values must be a JSON object")
        return Node({str(key): tree_from_raw(child) for key, child in value.items() if child is not None})

    @field_serializer("values")
    def _serialize_values(self, values: Node) -> dict[str, Any]:
        return tree_to_raw(values)

    @property
    def timestamp_millis(self) -> int | float:
        """Sample time as UNIX milliseconds."""
        return self.timestamp * 1000

    def __str__(self) -> str:
        return f"MetricSample(host={self.host}, timestamp={self.timestamp}, keys={list(self.values.children.keys())})"


class TimelineEvent(BaseModel):
    """A job or stage submission reported by the job tracker."""

    name: str = Field(default="", description="Job or stage name")
    submitted: int | float = Field(
        ...,
        validation_alias=AliasChoices("submitted", "submitted_at_millis", "submittedAtMillis"),
        description="Submission time as UNIX milliseconds",
    )


def parse_sample(raw: Any) -> MetricSample:
    """Parse one raw sample (mapping, JSON string or bytes).

    Raises:
        MalformedSampleError: If the sample cannot be decoded or validated.
    """
    if isinstance(raw, MetricSample):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        if not isinstance(raw, Mapping):
            raise MalformedSampleError("Sample must be a JSON object")
        return MetricSample.model_validate(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise MalformedSampleError(f"Malformed sample: {e}") from e


def parse_samples(raws: Iterable[Any]) -> list[MetricSample]:
    """Parse raw samples, skipping the malformed ones."""
    samples: list[MetricSample] = []
    for index, raw in enumerate(raws):
        try:
            samples.append(parse_sample(raw))
        except MalformedSampleError as e:
            logger.warning(f"Skipping sample #{index}: {e}")
    return samples


def parse_timeline_events(raws: Iterable[Any]) -> list[TimelineEvent]:
    """Parse job/stage descriptors, skipping the malformed ones."""
    events: list[TimelineEvent] = []
    for raw in raws:
        try:
            events.append(TimelineEvent.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping timeline event {raw!r}: {e}")
    return events
