"""
Host identity resolution.

Collectors report hosts as ``<hostname>_<executorId>``. System resource
metrics describe the physical machine, so under that namespace every
executor of a host collapses into one series; everywhere else each executor
keeps its own series.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stagescope.models.tree import split_path

__all__ = ["HostGrouper", "HostIdentity", "metric_namespace", "resolve_host", "split_host"]

EXECUTOR_SEPARATOR = "_"


@dataclass(frozen=True)
class HostIdentity:
    """Canonical identity of a raw host string."""

    raw: str
    canonical: str
    hostname: str
    executor_id: str | None = None

    @property
    def label(self) -> str:
        """Human-readable host description for tooltips."""
        if self.executor_id is None:
            return f"Host: {self.hostname}"
        return f"Host: {self.hostname} Executor: {self.executor_id}"


def split_host(raw: str) -> tuple[str, str | None]:
    """Split a raw host string into hostname and executor id.

    The executor id is the segment after the last underscore. Strings without
    an underscore, or with nothing on one side of it, have no executor id.
    """
    hostname, separator, executor_id = raw.rpartition(EXECUTOR_SEPARATOR)
    if not separator or not hostname or not executor_id:
        return raw, None
    return hostname, executor_id


def metric_namespace(metric_path: str) -> str:
    """Top-level namespace of a metric path (its first key)."""
    keys = split_path(metric_path)
    return keys[0] if keys else ""


def resolve_host(raw: str, namespace: str, system_namespace: str = "sigar") -> HostIdentity:
    """Resolve the canonical identity of a raw host string.

    Args:
        raw: Host string as reported by the collector
        namespace: Top-level namespace of the selected metric path
        system_namespace: Namespace of per-machine system resource metrics

    Returns:
        HostIdentity whose ``canonical`` is the series grouping key
    """
    hostname, executor_id = split_host(raw)
    canonical = hostname if namespace == system_namespace else raw
    return HostIdentity(raw=raw, canonical=canonical, hostname=hostname, executor_id=executor_id)


@dataclass
class HostGrouper:
    """Decides, for one build pass, whether a sample's host is accepted.

    In ``contiguous`` mode samples are assumed to be clustered by host: once
    a different canonical host is seen, the previous one is closed and any
    later sample mapping back to it is dropped. In ``grouped`` mode every
    sample is accepted and grouping is done purely by key.
    """

    mode: str = "grouped"
    _current: str | None = field(default=None, init=False)
    _closed: set[str] = field(default_factory=set, init=False)

    def accept(self, canonical: str) -> bool:
        if self.mode != "contiguous":
            return True
        if self._current is None or canonical == self._current:
            self._current = canonical
            return True
        if canonical in self._closed:
            return False
        self._closed.add(self._current)
        self._current = canonical
        return True

    @property
    def closed(self) -> frozenset[str]:
        return frozenset(self._closed)
