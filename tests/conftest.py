"""
Pytest configuration and shared fixtures.
"""

import json

import pytest

from stagescope.config import reset_settings


@pytest.fixture(autouse=True)
def clean_env_for_tests(monkeypatch):
    """Clean environment variables for test isolation.

    Ensures tests don't read the user's real data directory or settings
    by clearing STAGESCOPE_* and XDG_DATA_HOME environment variables.

    This fixture is applied automatically to all tests (autouse=True).
    """
    for name in [
        "STAGESCOPE_DATA_DIR",
        "STAGESCOPE_DEV_MODE",
        "STAGESCOPE_SYSTEM_NAMESPACE",
        "STAGESCOPE_LEAD_IN_MS",
        "STAGESCOPE_CUMULATIVE_PATTERNS",
        "STAGESCOPE_HOST_GROUPING",
        "STAGESCOPE_LIVE_HISTORY_LIMIT",
        "STAGESCOPE_MAX_JSONL_LINES",
        "STAGESCOPE_MAX_APPS",
        "XDG_DATA_HOME",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def make_sample(host, timestamp, cpu, jvm_heap=None, network=None):
    """Build a raw sample the way the HDFS reporter writes it."""
    values = {"sigar": {"cpu": {"combined": cpu}}}
    if network is not None:
        values["sigar"]["network"] = {"rxBytes": network}
    if jvm_heap is not None:
        values["jvm"] = {"heap": {"used": jvm_heap}}
    return {"host": host, "timestamp": timestamp, "values": values}


@pytest.fixture
def raw_samples():
    """Samples of two executors on node1 and one on node2, clustered by file."""
    return [
        make_sample("node1_0", 10, 0.5, jvm_heap=100, network=10),
        make_sample("node1_0", 11, 0.6, jvm_heap=110, network=20),
        make_sample("node1_1", 10, 0.4, jvm_heap=200, network=15),
        make_sample("node1_1", 11, 0.7, jvm_heap=210, network=25),
        make_sample("node2_0", 10, 0.9, jvm_heap=300, network=30),
        make_sample("node2_0", 11, 0.8, jvm_heap=310, network=40),
    ]


@pytest.fixture
def timeline():
    """Job and stage submissions (UNIX ms) around the sample times."""
    return {
        "jobs": [{"name": "job 0", "submitted": 9_500}],
        "stages": [
            {"name": "stage 0", "submitted": 9_600},
            {"name": "stage 1", "submitted": 10_500},
        ],
    }


@pytest.fixture
def app_data_dir(tmp_path, raw_samples, timeline):
    """Data directory holding one application written as collector output."""
    app_dir = tmp_path / "app-20170524120000-0001"
    app_dir.mkdir()

    files = {}
    for sample in raw_samples:
        files.setdefault(sample["host"], []).append(sample)
    for host, samples in files.items():
        with (app_dir / f"{host}.json").open("w") as f:
            for sample in samples:
                f.write(json.dumps(sample) + "\n")

    (app_dir / "_timeline.json").write_text(json.dumps(timeline))
    (app_dir / "_tooltips.json").write_text(json.dumps({"sigar.cpu.combined": "Combined CPU usage"}))
    return tmp_path
