"""
SampleWatcher - Singleton watcher for the collector data directory.

Collectors append one JSON sample per line to per-executor files. This
watcher tails those files with a single inotify watcher for the whole data
directory and fans new samples out to every subscription of the matching
application, which makes each application id a publish/subscribe topic.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from pathlib import Path

from watchfiles import awatch

from stagescope.models import MetricSample
from stagescope.utils.validators import validate_app_name

from .app_catalog import is_sample_file, parse_sample_line

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Subscription to the samples of one application."""

    id: str
    app: str
    queue: asyncio.Queue[MetricSample | None] = field(default_factory=asyncio.Queue)


class SampleWatcher:
    """Singleton watcher for the data directory.

    Multiple SSE connections subscribe to this watcher without consuming
    additional inotify file descriptors.
    """

    _instance: SampleWatcher | None = None
    _lock: asyncio.Lock | None = None

    def __init__(self, data_dir: Path) -> None:
        """Initialize the watcher.

        Note: Use get_instance() to get the singleton instance.
        """
        # Resolve to absolute path for consistent comparison with awatch paths
        self.data_dir = data_dir.resolve()
        self._subscriptions: dict[str, Subscription] = {}
        self._task: asyncio.Task[None] | None = None
        self._instance_lock = asyncio.Lock()
        # Read offsets for incremental tailing; only whole lines are consumed
        self._offsets: dict[Path, int] = {}

    @classmethod
    async def get_instance(cls, data_dir: Path) -> SampleWatcher:
        """Get or create singleton instance."""
        if cls._lock is None:
            cls._lock = asyncio.Lock()

        async with cls._lock:
            if cls._instance is None:
                cls._instance = cls(data_dir)
                logger.info(f"[Watcher] Created singleton SampleWatcher for {data_dir}")
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Used for testing."""
        cls._instance = None
        cls._lock = None

    def _parse_file_path(self, file_path: Path) -> str | None:
        """Return the application id of a sample file, or None for other files."""
        try:
            relative = file_path.relative_to(self.data_dir)
        except ValueError:
            return None

        if len(relative.parts) != 2 or not is_sample_file(file_path):
            return None
        return relative.parts[0]

    def _parse_lines(self, chunk: bytes, file_path: Path) -> list[MetricSample]:
        samples = []
        for line in chunk.decode("utf-8", errors="replace").splitlines():
            sample = parse_sample_line(line, source=str(file_path))
            if sample is not None:
                samples.append(sample)
        return samples

    def _read_new_lines(self, file_path: Path) -> list[MetricSample]:
        """Read complete lines appended since the last read of a file."""
        offset = self._offsets.get(file_path, 0)
        with open(file_path, "rb") as f:
            f.seek(offset)
            chunk = f.read()

        # A trailing partial line is left for the next change event
        last_newline = chunk.rfind(b"\n")
        if last_newline == -1:
            return []
        self._offsets[file_path] = offset + last_newline + 1
        return self._parse_lines(chunk[: last_newline + 1], file_path)

    def _read_dispatched_lines(self, file_path: Path) -> list[MetricSample]:
        """Read the lines of a file up to its offset, leaving the offset unchanged."""
        with open(file_path, "rb") as f:
            chunk = f.read(self._offsets[file_path])
        return self._parse_lines(chunk, file_path)

    def _read_initial_data(self, app: str) -> list[MetricSample]:
        """Read the samples already written for an application.

        While other subscriptions of the application are active, tracked files
        are read only up to their offset; lines past it are still pending
        dispatch and reach every subscription, this one included, through its
        queue.
        """
        app_dir = self.data_dir / app
        if not app_dir.is_dir():
            logger.warning(f"[Watcher] Application directory does not exist: {app_dir}")
            return []

        shared = any(sub.app == app for sub in self._subscriptions.values())
        samples: list[MetricSample] = []
        for file_path in sorted(f for f in app_dir.iterdir() if is_sample_file(f)):
            resolved = file_path.resolve()
            try:
                if shared and resolved in self._offsets:
                    samples.extend(self._read_dispatched_lines(resolved))
                else:
                    self._offsets[resolved] = 0
                    samples.extend(self._read_new_lines(resolved))
            except OSError as e:
                logger.warning(f"[Watcher] Error reading {resolved}: {e}")
        return samples

    async def _dispatch_loop(self) -> None:
        """Main loop: watch data_dir and dispatch new samples to subscribers."""
        logger.info(f"[Watcher] Starting dispatch loop for {self.data_dir}")
        watcher = None

        try:
            watcher = awatch(str(self.data_dir))
            async for changes in watcher:
                logger.debug(f"[Watcher] Received {len(changes)} change(s)")

                for _change_type, changed_path_str in changes:
                    changed_path = Path(changed_path_str).resolve()
                    app = self._parse_file_path(changed_path)
                    if app is None or not changed_path.exists():
                        continue

                    async with self._instance_lock:
                        subscribers = [sub for sub in self._subscriptions.values() if sub.app == app]
                        if not subscribers:
                            continue
                        try:
                            samples = self._read_new_lines(changed_path)
                        except OSError as e:
                            logger.error(f"[Watcher] Error reading {changed_path}: {e}")
                            continue
                        for sample in samples:
                            for sub in subscribers:
                                await sub.queue.put(sample)

        except asyncio.CancelledError:
            logger.info("[Watcher] Dispatch loop cancelled")
            raise
        except Exception as e:
            logger.error(f"[Watcher] Error in dispatch loop: {e}")
        finally:
            if watcher is not None:
                try:
                    await asyncio.wait_for(watcher.aclose(), timeout=2.0)
                except asyncio.TimeoutError:
                    logger.warning("[Watcher] Timeout closing awatch instance")
                except Exception as e:
                    logger.error(f"[Watcher] Error closing watcher: {e}")

    async def subscribe(self, app: str) -> AsyncGenerator[MetricSample, None]:
        """Subscribe to the samples of one application.

        Existing samples are yielded first, then new samples as they are
        appended, in file order.

        Raises:
            ValueError: If the application id is invalid
        """
        validate_app_name(app)

        subscription = Subscription(id=str(uuid.uuid4()), app=app)
        logger.info(f"[Watcher] New subscription {subscription.id} for app={app}")

        async with self._instance_lock:
            initial = self._read_initial_data(app)
            self._subscriptions[subscription.id] = subscription
            if self._task is None or self._task.done():
                logger.info("[Watcher] Starting dispatch task")
                self._task = asyncio.create_task(self._dispatch_loop())

        try:
            for sample in initial:
                yield sample

            while True:
                queued = await subscription.queue.get()
                if queued is None:  # Sentinel for unsubscribe
                    break
                yield queued
        finally:
            await self._unsubscribe(subscription.id)

    async def _unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription, stopping the dispatch task after the last one."""
        logger.info(f"[Watcher] Unsubscribing {subscription_id}")

        async with self._instance_lock:
            self._subscriptions.pop(subscription_id, None)

            if not self._subscriptions and self._task is not None:
                logger.info("[Watcher] No more subscribers, stopping dispatch task")
                self._task.cancel()
                try:
                    await asyncio.wait_for(self._task, timeout=2.0)
                except asyncio.TimeoutError:
                    logger.warning("[Watcher] Timeout waiting for dispatch task to finish")
                except asyncio.CancelledError:
                    pass
                self._task = None

    @property
    def subscription_count(self) -> int:
        """Get the number of active subscriptions."""
        return len(self._subscriptions)
