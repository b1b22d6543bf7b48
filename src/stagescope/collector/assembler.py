"""
Collector-side sample assembly.

Metric registries report one flat, dotted name per value, e.g.
``app-20170524-0001.3.executor.sigar.cpu.combined``. This module folds the
values of one reporting tick into a single nested sample per host+executor,
the shape the series engine consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stagescope.logger import logger
from stagescope.models import MetricSample
from stagescope.models.tree import split_path

__all__ = ["RegistryName", "SampleAssembler", "parse_registry_name", "put_leaf"]

# app id, executor id and source name precede the metric keys
_KEYS_OFFSET = 3


@dataclass(frozen=True)
class RegistryName:
    """Parts of a dotted registry metric name."""

    app_id: str
    executor_id: str
    keys: tuple[str, ...]


def parse_registry_name(name: str) -> RegistryName | None:
    """Split a registry metric name into application, executor and metric keys.

    Returns:
        RegistryName, or None when the name does not belong to an application
        executor (first segment not starting with ``app``, non-integer
        executor id, or no metric keys).
    """
    parts = split_path(name)
    if len(parts) <= _KEYS_OFFSET or not parts[0].startswith("app"):
        return None
    try:
        int(parts[1])
    except ValueError:
        return None
    return RegistryName(app_id=parts[0], executor_id=parts[1], keys=tuple(parts[_KEYS_OFFSET:]))


def put_leaf(tree: dict[str, Any], keys: tuple[str, ...] | list[str], value: Any) -> bool:
    """Store ``value`` under the nested key path, creating groups on the way.

    A scalar already stored on the way is never replaced by a group.

    Returns:
        True if the value was stored
    """
    if not keys:
        return False
    node = tree
    for key in keys[:-1]:
        child = node.setdefault(key, {})
        if not isinstance(child, dict):
            return False
        node = child
    if isinstance(node.get(keys[-1]), dict):
        return False
    node[keys[-1]] = value
    return True


class SampleAssembler:
    """Buffers the values of one reporting tick and emits it as a sample.

    A tick ends when a value with a different timestamp arrives; the buffered
    values are then emitted as one MetricSample for ``<hostname>_<executor>``.
    """

    def __init__(self, hostname: str) -> None:
        self.hostname = hostname
        self.app_id: str | None = None
        self.executor_id: str | None = None
        self._timestamp: int | float | None = None
        self._buffer: dict[str, Any] = {}

    @property
    def host(self) -> str:
        return f"{self.hostname}_{self.executor_id}"

    def record(self, timestamp: int | float, name: str, value: Any) -> MetricSample | None:
        """Record one registry value reported at ``timestamp`` (UNIX seconds).

        Returns:
            The completed sample of the previous tick, if this value starts a new one
        """
        parsed = parse_registry_name(name)
        if parsed is None:
            return None

        if self.app_id is None:
            self.app_id = parsed.app_id
            self.executor_id = parsed.executor_id

        completed = None
        if self._timestamp is not None and timestamp != self._timestamp:
            completed = self.flush()

        self._timestamp = timestamp
        if not put_leaf(self._buffer, parsed.keys, value):
            logger.debug(f"Ignoring {name}: conflicts with an already reported value")
        return completed

    def flush(self) -> MetricSample | None:
        """Emit the buffered tick, if any."""
        if self._timestamp is None or not self._buffer:
            return None
        sample = MetricSample(host=self.host, timestamp=self._timestamp, values=self._buffer)
        self._buffer = {}
        return sample
