"""Stable host color assignment."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

# d3 category10
DEFAULT_PALETTE: tuple[str, ...] = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)


class ColorCache:
    """Assigns each canonical host a color on first appearance.

    Assignments are never evicted, so a host keeps its color across
    re-renders and metric path changes for the lifetime of the cache.
    """

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE) -> None:
        if not palette:
            raise ValueError("Palette must contain at least one color")
        self._palette = tuple(palette)
        self._colors: dict[str, str] = {}

    def color_for(self, host: str) -> str:
        color = self._colors.get(host)
        if color is None:
            color = self._palette[len(self._colors) % len(self._palette)]
            self._colors[host] = color
        return color

    def colors_for(self, hosts: Iterable[str]) -> list[str]:
        return [self.color_for(host) for host in hosts]

    def __contains__(self, host: object) -> bool:
        return host in self._colors

    def __len__(self) -> int:
        return len(self._colors)
