"""
Nearest-marker alignment.

Job and stage counts are small next to sample counts, so every lookup is a
linear vectorized scan over the marker times instead of a sorted index.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

__all__ = ["MarkerIndex", "nearest_marker_index"]


class MarkerIndex:
    """Marker submission times in arrival order.

    Returned indices refer to that arrival order, not to time order.
    """

    def __init__(self, marker_times: Sequence[int | float]) -> None:
        self._times = np.asarray(marker_times, dtype=np.float64)

    def __len__(self) -> int:
        return int(self._times.size)

    @property
    def earliest(self) -> float | None:
        """Earliest marker time, or None without markers."""
        if self._times.size == 0:
            return None
        return float(self._times.min())

    def nearest(self, timestamp: int | float) -> int:
        """Index of the nearest marker at or before ``timestamp``.

        Boundary rules:
        - no markers: 0
        - ``timestamp`` equal to a marker time while later markers exist:
          the earliest later marker (equality is not a floor match)
        - otherwise the latest marker strictly before ``timestamp``
        - ``timestamp`` before every marker: 0
        """
        times = self._times
        if times.size == 0:
            return 0

        above = np.flatnonzero(times > timestamp)
        if above.size and np.any(times == timestamp):
            return int(above[np.argmin(times[above])])

        below = np.flatnonzero(times < timestamp)
        if below.size:
            return int(below[np.argmax(times[below])])

        return 0


def nearest_marker_index(timestamp: int | float, marker_times: Sequence[int | float]) -> int:
    """Index of the nearest marker at or before ``timestamp``.

    See MarkerIndex.nearest for the boundary rules.
    """
    return MarkerIndex(marker_times).nearest(timestamp)
