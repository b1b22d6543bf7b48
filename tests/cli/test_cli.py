"""
Tests for the stagescope command line interface.
"""

import json
import sys

import pytest

from stagescope import cli

APP = "app-20170524120000-0001"


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["stagescope", *args])
    cli.main()


class TestCli:
    """Tests for the paths and chart commands."""

    def test_paths(self, monkeypatch, capsys, app_data_dir):
        run_cli(monkeypatch, "paths", APP, "--data-dir", str(app_data_dir))

        assert capsys.readouterr().out.splitlines() == [
            "jvm.heap.used",
            "sigar.cpu.combined",
            "sigar.network.rxBytes",
        ]

    def test_chart(self, monkeypatch, capsys, app_data_dir):
        run_cli(monkeypatch, "chart", APP, "sigar.cpu.combined", "--data-dir", str(app_data_dir))

        payload = json.loads(capsys.readouterr().out)
        assert payload["legend"] == ["node1", "node2"]

    def test_unknown_app_exits(self, monkeypatch, capsys, app_data_dir):
        with pytest.raises(SystemExit) as exc_info:
            run_cli(monkeypatch, "paths", "app-missing", "--data-dir", str(app_data_dir))

        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().out

    def test_serve_uses_data_dir(self, monkeypatch, tmp_path):
        # serve exports the data directory for reload workers
        monkeypatch.setenv("STAGESCOPE_DATA_DIR", str(tmp_path))
        calls = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

        run_cli(monkeypatch, "serve", "--port", "3999", "--data-dir", str(tmp_path))

        args, kwargs = calls[0]
        assert args == ("stagescope.dashboard.main:app",)
        assert kwargs["port"] == 3999
        assert kwargs["reload"] is False

        from stagescope.dashboard.dependencies import configure_data_dir, get_app_catalog

        assert get_app_catalog().data_dir == tmp_path
        configure_data_dir(None)

    def test_no_command_prints_help(self, monkeypatch, capsys):
        run_cli(monkeypatch)

        assert "usage" in capsys.readouterr().out
