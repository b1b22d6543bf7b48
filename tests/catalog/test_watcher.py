"""
Tests for SampleWatcher and AppCatalog.subscribe().
"""

import asyncio
import contextlib
import json

import pytest

from stagescope.catalog import AppCatalog, SampleWatcher

APP = "app-20170524120000-0001"


async def collect_samples_with_timeout(async_gen, timeout=1.0):
    """Collect samples from AsyncGenerator (with timeout)."""
    samples = []

    async def _collect():
        async for sample in async_gen:
            samples.append(sample)

    with contextlib.suppress(asyncio.TimeoutError):
        await asyncio.wait_for(_collect(), timeout=timeout)
    return samples


class TestSampleWatcher:
    """Tests for SampleWatcher class."""

    @pytest.fixture(autouse=True)
    def reset_singleton(self):
        """Reset singleton instance before and after each test."""
        SampleWatcher.reset_instance()
        yield
        SampleWatcher.reset_instance()

    @pytest.mark.asyncio
    async def test_get_instance_creates_singleton(self, tmp_path):
        """Test that get_instance returns the same instance."""
        watcher1 = await SampleWatcher.get_instance(tmp_path)
        watcher2 = await SampleWatcher.get_instance(tmp_path)

        assert watcher1 is watcher2
        assert watcher1.data_dir == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_subscribe_reads_initial_data(self, app_data_dir):
        """Test that subscribe yields samples already written."""
        watcher = await SampleWatcher.get_instance(app_data_dir)

        samples = await collect_samples_with_timeout(watcher.subscribe(APP), timeout=0.5)

        assert [s.host for s in samples] == ["node1_0", "node1_0", "node1_1", "node1_1", "node2_0", "node2_0"]

    @pytest.mark.asyncio
    async def test_subscribe_detects_appended_samples(self, app_data_dir):
        """Test that subscribe yields samples appended after subscribing."""
        watcher = await SampleWatcher.get_instance(app_data_dir)
        sample_file = app_data_dir / APP / "node2_0.json"

        async def append_later():
            await asyncio.sleep(0.3)
            with sample_file.open("a") as f:
                f.write(json.dumps({"host": "node2_0", "timestamp": 12, "values": {"a": 1}}) + "\n")

        writer = asyncio.create_task(append_later())
        samples = await collect_samples_with_timeout(watcher.subscribe(APP), timeout=2.0)
        await writer

        assert len(samples) == 7
        assert samples[-1].timestamp == 12

    @pytest.mark.asyncio
    async def test_partial_line_waits_for_newline(self, tmp_path):
        """A line without its newline is not consumed yet."""
        app_dir = tmp_path / APP
        app_dir.mkdir()
        sample_file = app_dir / "node1_0.json"
        line = json.dumps({"host": "node1_0", "timestamp": 1, "values": {"a": 1}})
        sample_file.write_text(line[:10])

        watcher = SampleWatcher(tmp_path)
        assert watcher._read_new_lines(sample_file.resolve()) == []

        sample_file.write_text(line + "\n")
        samples = watcher._read_new_lines(sample_file.resolve())
        assert [s.timestamp for s in samples] == [1]

    @pytest.mark.asyncio
    async def test_parse_file_path(self, tmp_path):
        watcher = SampleWatcher(tmp_path)
        base = tmp_path.resolve()

        assert watcher._parse_file_path(base / APP / "node1_0.json") == APP
        assert watcher._parse_file_path(base / APP / "_timeline.json") is None
        assert watcher._parse_file_path(base / "node1_0.json") is None

    @pytest.mark.asyncio
    async def test_subscribe_rejects_invalid_app(self, tmp_path):
        watcher = await SampleWatcher.get_instance(tmp_path)

        with pytest.raises(ValueError):
            await watcher.subscribe("../evil").__anext__()

    @pytest.mark.asyncio
    async def test_unsubscribe_on_close(self, app_data_dir):
        watcher = await SampleWatcher.get_instance(app_data_dir)
        stream = watcher.subscribe(APP)

        await stream.__anext__()
        assert watcher.subscription_count == 1

        await stream.aclose()
        assert watcher.subscription_count == 0

    @pytest.mark.asyncio
    async def test_second_subscriber_does_not_steal_pending_samples(self, app_data_dir):
        """A line appended before a second subscription still reaches the first one."""
        watcher = await SampleWatcher.get_instance(app_data_dir)
        first = watcher.subscribe(APP)
        second = None
        try:
            for _ in range(6):
                await asyncio.wait_for(first.__anext__(), timeout=1.0)
            # Let the dispatch loop start watching
            await asyncio.sleep(0.5)

            with (app_data_dir / APP / "node1_0.json").open("a") as f:
                f.write(json.dumps({"host": "node1_0", "timestamp": 99, "values": {"a": 1}}) + "\n")

            second = watcher.subscribe(APP)
            second_initial = [await asyncio.wait_for(second.__anext__(), timeout=1.0) for _ in range(6)]
            assert 99 not in [s.timestamp for s in second_initial]

            first_next = await asyncio.wait_for(first.__anext__(), timeout=5.0)
            second_next = await asyncio.wait_for(second.__anext__(), timeout=5.0)
        finally:
            await first.aclose()
            if second is not None:
                await second.aclose()

        assert first_next.timestamp == 99
        assert second_next.timestamp == 99

    @pytest.mark.asyncio
    async def test_second_subscriber_reads_dispatched_lines(self, app_data_dir):
        """Lines already dispatched to a subscription are part of a new one's initial data."""
        watcher = await SampleWatcher.get_instance(app_data_dir)
        first = watcher.subscribe(APP)
        await first.__anext__()

        sample_file = (app_data_dir / APP / "node1_0.json").resolve()
        with sample_file.open("a") as f:
            f.write(json.dumps({"host": "node1_0", "timestamp": 50, "values": {"a": 1}}) + "\n")
        # Simulate the dispatch loop having consumed the new line
        assert [s.timestamp for s in watcher._read_new_lines(sample_file)] == [50]

        try:
            samples = await collect_samples_with_timeout(watcher.subscribe(APP), timeout=0.5)
        finally:
            await first.aclose()

        assert len(samples) == 7
        assert samples[2].timestamp == 50


class TestCatalogSubscribe:
    """Tests for AppCatalog.subscribe()."""

    @pytest.fixture(autouse=True)
    def reset_singleton(self):
        SampleWatcher.reset_instance()
        yield
        SampleWatcher.reset_instance()

    @pytest.mark.asyncio
    async def test_subscribe_yields_existing_samples(self, app_data_dir):
        catalog = AppCatalog(app_data_dir)

        samples = await collect_samples_with_timeout(catalog.subscribe(APP), timeout=0.5)

        assert len(samples) == 6
