"""
Tests for MetricSample and TimelineEvent parsing.
"""

import json

import pytest

from stagescope.exceptions import MalformedSampleError
from stagescope.models import MetricSample, Node, TimelineEvent, parse_sample, parse_samples, parse_timeline_events


class TestMetricSample:
    """Tests for MetricSample validation."""

    def test_values_from_mapping(self):
        sample = MetricSample(host="node1_0", timestamp=10, values={"sigar": {"cpu": {"combined": 0.5}}})

        assert isinstance(sample.values, Node)
        assert sample.timestamp_millis == 10_000

    def test_values_from_json_string(self):
        """Historical batches carry values as a JSON-encoded string."""
        sample = MetricSample(host="node1_0", timestamp=10, values='{"sigar": {"cpu": {"combined": 0.5}}}')

        assert "sigar" in sample.values.children

    def test_values_must_be_object(self):
        with pytest.raises(ValueError):
            MetricSample(host="node1_0", timestamp=10, values="[1, 2]")

    def test_dump_restores_plain_values(self):
        sample = MetricSample(host="node1_0", timestamp=10, values={"a": {"b": 1}})

        assert sample.model_dump() == {"host": "node1_0", "timestamp": 10, "values": {"a": {"b": 1}}}

    def test_fractional_timestamp(self):
        sample = MetricSample(host="node1_0", timestamp=10.5, values={"a": 1})

        assert sample.timestamp_millis == 10_500


class TestParseSample:
    """Tests for parse_sample and parse_samples."""

    def test_parse_json_line(self):
        line = json.dumps({"host": "node1_0", "timestamp": 10, "values": {"a": 1}})

        sample = parse_sample(line)

        assert sample.host == "node1_0"

    def test_invalid_json_raises_malformed(self):
        with pytest.raises(MalformedSampleError):
            parse_sample("{not json")

    def test_missing_field_raises_malformed(self):
        with pytest.raises(MalformedSampleError):
            parse_sample({"host": "node1_0", "values": {"a": 1}})

    def test_non_object_raises_malformed(self):
        with pytest.raises(MalformedSampleError):
            parse_sample("[1, 2, 3]")

    def test_parse_samples_skips_malformed(self):
        raws = [
            {"host": "node1_0", "timestamp": 10, "values": {"a": 1}},
            "garbage",
            {"host": "node1_0", "timestamp": 11, "values": {"a": 2}},
        ]

        samples = parse_samples(raws)

        assert [s.timestamp for s in samples] == [10, 11]


class TestTimelineEvent:
    """Tests for job/stage descriptors."""

    def test_accepts_collector_field_names(self):
        assert TimelineEvent.model_validate({"submittedAtMillis": 5}).submitted == 5
        assert TimelineEvent.model_validate({"submitted_at_millis": 6}).submitted == 6
        assert TimelineEvent.model_validate({"name": "stage 0", "submitted": 7}).name == "stage 0"

    def test_parse_timeline_events_skips_malformed(self):
        events = parse_timeline_events([{"submitted": 1}, {"name": "no time"}, {"submitted": 3}])

        assert [e.submitted for e in events] == [1, 3]
