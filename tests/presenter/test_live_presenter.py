"""
Tests for the live presenter.
"""

import json

import pytest

from stagescope.config import ViewerSettings
from stagescope.models import parse_samples, parse_timeline_events
from stagescope.presenter import BatchPresenter, LivePresenter


@pytest.fixture
def samples(raw_samples):
    return parse_samples(raw_samples)


@pytest.fixture
def events(timeline):
    return parse_timeline_events(timeline["stages"]), parse_timeline_events(timeline["jobs"])


class TestLivePresenter:
    """Tests for LivePresenter."""

    def test_push_without_selection_returns_none(self, samples):
        presenter = LivePresenter(settings=ViewerSettings())

        assert presenter.push(samples[0]) is None
        assert len(presenter.history) == 1

    def test_schema_discovered_from_first_sample(self, samples):
        presenter = LivePresenter(settings=ViewerSettings())
        presenter.push(samples[0])

        assert presenter.metric_paths == ["jvm.heap.used", "sigar.cpu.combined", "sigar.network.rxBytes"]

    def test_replay_matches_batch(self, samples, events):
        """Pushing every sample yields the same payload as a batch render."""
        stages, jobs = events
        settings = ViewerSettings()
        live = LivePresenter(stages=stages, jobs=jobs, settings=settings)
        live.select("sigar.cpu.combined")

        payload = live.extend(samples)

        batch = BatchPresenter(samples, stages=stages, jobs=jobs, settings=settings)
        assert payload == batch.render("sigar.cpu.combined")

    def test_select_emits_empty_payload_first(self, samples):
        rendered = []
        presenter = LivePresenter(settings=ViewerSettings(), on_render=rendered.append)
        presenter.extend(samples)

        presenter.select("jvm.heap.used")

        assert len(rendered) == 2
        assert rendered[0].is_empty
        assert rendered[1].legend == ["node1_0", "node1_1", "node2_0"]

    def test_select_none_clears_chart(self, samples):
        presenter = LivePresenter(settings=ViewerSettings())
        presenter.select("jvm.heap.used")
        presenter.extend(samples)

        payload = presenter.select(None)

        assert payload.is_empty
        assert presenter.metric_path is None
        assert presenter.push(samples[0]) is None

    def test_every_push_rerenders(self, samples):
        rendered = []
        presenter = LivePresenter(settings=ViewerSettings(), on_render=rendered.append)
        presenter.select("jvm.heap.used")
        rendered.clear()

        presenter.extend(samples[:3])

        assert len(rendered) == 3
        assert rendered[-1].legend == ["node1_0", "node1_1"]

    def test_colors_stable_across_selection_changes(self, samples):
        presenter = LivePresenter(settings=ViewerSettings())
        presenter.extend(samples)

        first = presenter.select("jvm.heap.used")
        presenter.select("sigar.cpu.combined")
        again = presenter.select("jvm.heap.used")

        assert again.colors == first.colors

    def test_push_message_skips_malformed(self, raw_samples):
        presenter = LivePresenter(settings=ViewerSettings())

        assert presenter.push_message("{broken") is None
        presenter.push_message(json.dumps(raw_samples[0]))

        assert len(presenter.history) == 1

    def test_history_limit(self, samples):
        presenter = LivePresenter(settings=ViewerSettings(live_history_limit=2))

        presenter.extend(samples)

        assert [s.host for s in presenter.history] == ["node2_0", "node2_0"]

    def test_update_timeline_rerenders(self, samples, events):
        stages, jobs = events
        presenter = LivePresenter(settings=ViewerSettings())
        presenter.select("sigar.cpu.combined")
        presenter.extend(samples)

        payload = presenter.update_timeline(stages=stages, jobs=jobs)

        assert len(payload.markers) == 3
        assert payload.series[0][0].synthetic
