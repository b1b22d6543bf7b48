"""
Stagescope presenters.

Turn samples and the job/stage timeline into render-ready chart payloads:
- batch: a complete historical collection
- live: an unbounded push stream
"""

from .batch import BatchPresenter, build_chart_payload, build_markers
from .colors import DEFAULT_PALETTE, ColorCache
from .live import LivePresenter, LiveSession

__all__ = [
    "DEFAULT_PALETTE",
    "BatchPresenter",
    "ColorCache",
    "LivePresenter",
    "LiveSession",
    "build_chart_payload",
    "build_markers",
]
