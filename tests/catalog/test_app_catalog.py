"""
Tests for AppCatalog.
"""

import os

import pytest

from stagescope.catalog import AppCatalog
from stagescope.exceptions import AppNotFoundError

APP = "app-20170524120000-0001"


class TestAppCatalog:
    """Tests for reading collector output."""

    def test_get_apps(self, app_data_dir):
        apps = AppCatalog(app_data_dir).get_apps()

        assert [a.name for a in apps] == [APP]
        assert apps[0].sample_file_count == 3
        assert apps[0].last_update is not None

    def test_get_apps_sorted_by_last_update(self, app_data_dir):
        older = app_data_dir / "app-older"
        older.mkdir()
        sample_file = older / "node1_0.json"
        sample_file.write_text("")
        os.utime(sample_file, (0, 0))

        apps = AppCatalog(app_data_dir).get_apps()

        assert [a.name for a in apps] == [APP, "app-older"]

    def test_get_apps_missing_data_dir(self, tmp_path):
        assert AppCatalog(tmp_path / "missing").get_apps() == []

    def test_get_apps_respects_limit(self, app_data_dir, monkeypatch):
        from stagescope.config import reset_settings

        (app_data_dir / "app-other").mkdir()
        monkeypatch.setenv("STAGESCOPE_MAX_APPS", "1")
        reset_settings()

        assert len(AppCatalog(app_data_dir).get_apps()) == 1

    def test_load_samples_clustered_by_file(self, app_data_dir):
        samples = AppCatalog(app_data_dir).load_samples(APP)

        assert [s.host for s in samples] == ["node1_0", "node1_0", "node1_1", "node1_1", "node2_0", "node2_0"]

    def test_load_samples_skips_malformed_lines(self, app_data_dir):
        with (app_data_dir / APP / "node1_0.json").open("a") as f:
            f.write("{broken\n\n")

        samples = AppCatalog(app_data_dir).load_samples(APP)

        assert len(samples) == 6

    def test_metadata_files_are_not_samples(self, app_data_dir):
        files = AppCatalog(app_data_dir).sample_files(APP)

        assert [f.name for f in files] == ["node1_0.json", "node1_1.json", "node2_0.json"]

    def test_load_timeline(self, app_data_dir):
        timeline = AppCatalog(app_data_dir).load_timeline(APP)

        assert [j.submitted for j in timeline.jobs] == [9_500]
        assert [s.name for s in timeline.stages] == ["stage 0", "stage 1"]

    def test_load_timeline_missing(self, app_data_dir):
        (app_data_dir / APP / "_timeline.json").unlink()

        timeline = AppCatalog(app_data_dir).load_timeline(APP)

        assert timeline.jobs == []
        assert timeline.stages == []

    def test_load_tooltips(self, app_data_dir):
        assert AppCatalog(app_data_dir).load_tooltips(APP) == {"sigar.cpu.combined": "Combined CPU usage"}

    def test_unknown_app(self, app_data_dir):
        with pytest.raises(AppNotFoundError):
            AppCatalog(app_data_dir).load_samples("app-missing")

    def test_invalid_app_id(self, app_data_dir):
        with pytest.raises(ValueError):
            AppCatalog(app_data_dir).load_samples("../etc")
