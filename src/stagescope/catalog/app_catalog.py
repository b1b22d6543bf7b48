"""
AppCatalog - Catalog for discovering applications and loading their samples.

Collector output is laid out as::

    <data_dir>/<app_id>/<hostname>_<executor>.json   one JSON sample per line
    <data_dir>/<app_id>/_timeline.json               {"jobs": [...], "stages": [...]}
    <data_dir>/<app_id>/_tooltips.json               {metric path: description}

The catalog only reads; it never writes collector data.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from stagescope.config import get_settings
from stagescope.exceptions import AppNotFoundError, MalformedSampleError
from stagescope.logger import logger
from stagescope.models import MetricSample, TimelineEvent, parse_sample, parse_timeline_events
from stagescope.utils.validators import validate_app_name, validate_safe_path

SAMPLE_FILE_SUFFIX = ".json"
TIMELINE_FILENAME = "_timeline.json"
TOOLTIPS_FILENAME = "_tooltips.json"


class AppInfo(BaseModel):
    """Application information."""

    name: str
    sample_file_count: int
    last_update: datetime | None = None


class Timeline(BaseModel):
    """Job and stage submissions of one application, in arrival order."""

    jobs: list[TimelineEvent] = []
    stages: list[TimelineEvent] = []


def is_sample_file(path: Path) -> bool:
    """Whether a file holds collector samples (not timeline/tooltip metadata)."""
    return path.suffix == SAMPLE_FILE_SUFFIX and not path.name.startswith("_") and not path.is_symlink()


def parse_sample_line(line: str, source: str = "") -> MetricSample | None:
    """Parse one JSON line into a sample.

    Blank lines yield None; malformed lines are logged and yield None.
    """
    if not line.strip():
        return None
    try:
        return parse_sample(line)
    except MalformedSampleError as e:
        logger.warning(f"Skipping malformed sample in {source or 'input'}: {e}")
        return None


def _read_json_file(path: Path) -> Any:
    """Read a JSON metadata file, returning None if missing or invalid."""
    if not path.exists():
        return None
    try:
        with open(path) as f:
            return json.load(f)
    except Exception as e:
        logger.warning(f"Error reading {path}: {e}")
        return None


class AppCatalog:
    """Catalog for discovering applications and reading their collector output."""

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize the app catalog.

        Args:
            data_dir: Base directory holding one directory per application
        """
        self.data_dir = Path(data_dir)

    def _app_dir(self, app: str) -> Path:
        validate_app_name(app)
        app_dir = self.data_dir / app
        validate_safe_path(app_dir, self.data_dir)
        if not app_dir.is_dir():
            raise AppNotFoundError(f"Application '{app}' not found")
        return app_dir

    def get_apps(self) -> list[AppInfo]:
        """List applications, most recently updated first."""
        if not self.data_dir.exists():
            return []

        apps: list[AppInfo] = []
        for app_dir in self.data_dir.iterdir():
            if not app_dir.is_dir() or app_dir.is_symlink():
                continue
            try:
                validate_app_name(app_dir.name)
            except ValueError:
                continue

            sample_files = [f for f in app_dir.iterdir() if is_sample_file(f)]
            last_update = None
            if sample_files:
                mtime = max(f.stat().st_mtime for f in sample_files)
                last_update = datetime.fromtimestamp(mtime, tz=timezone.utc)
            apps.append(AppInfo(name=app_dir.name, sample_file_count=len(sample_files), last_update=last_update))

        apps.sort(key=lambda app: app.last_update or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return apps[: get_settings().max_apps]

    def sample_files(self, app: str) -> list[Path]:
        """Sample files of an application, sorted by name.

        Raises:
            AppNotFoundError: If the application directory does not exist
        """
        app_dir = self._app_dir(app)
        return sorted(f for f in app_dir.iterdir() if is_sample_file(f))

    def load_samples(self, app: str) -> list[MetricSample]:
        """Load every sample of an application.

        Files are read one after another, so samples come out clustered by
        host+executor, each file in its own line order.

        Raises:
            AppNotFoundError: If the application directory does not exist
        """
        max_lines = get_settings().max_jsonl_lines
        samples: list[MetricSample] = []

        for sample_file in self.sample_files(app):
            with open(sample_file) as f:
                for line_number, line in enumerate(f):
                    if line_number >= max_lines:
                        logger.warning(f"{sample_file} exceeds {max_lines} lines, truncating")
                        break
                    sample = parse_sample_line(line, source=str(sample_file))
                    if sample is not None:
                        samples.append(sample)

        logger.debug(f"Loaded {len(samples)} sample(s) for {app}")
        return samples

    def load_timeline(self, app: str) -> Timeline:
        """Load the job/stage timeline of an application (empty if absent)."""
        raw = _read_json_file(self._app_dir(app) / TIMELINE_FILENAME)
        if not isinstance(raw, dict):
            return Timeline()
        return Timeline(
            jobs=parse_timeline_events(raw.get("jobs") or []),
            stages=parse_timeline_events(raw.get("stages") or []),
        )

    def load_tooltips(self, app: str) -> dict[str, str]:
        """Load metric path descriptions of an application (empty if absent)."""
        raw = _read_json_file(self._app_dir(app) / TOOLTIPS_FILENAME)
        if not isinstance(raw, dict):
            return {}
        return {str(path): str(text) for path, text in raw.items()}

    async def subscribe(self, app: str) -> AsyncGenerator[MetricSample, None]:
        """Stream the samples of an application: existing ones first, then new ones as written.

        Raises:
            AppNotFoundError: If the application directory does not exist
        """
        from stagescope.catalog.watcher import SampleWatcher

        self._app_dir(app)
        watcher = await SampleWatcher.get_instance(self.data_dir)
        async for sample in watcher.subscribe(app):
            yield sample
