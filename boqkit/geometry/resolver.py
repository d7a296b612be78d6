"""GeometryResolver: grid-line and level lookups.

Turns grid labels into offsets and level labels into elevations, and
derives spans, plan areas and storey heights from them.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from boqkit.errors import GeometryError
from boqkit.models.project import GridLine, GridRectBoundary, Level, PolygonBoundary

logger = logging.getLogger(__name__)


class Rect:
    """Plan rectangle bounded by two grid spans."""

    def __init__(self, width: float, depth: float) -> None:
        self.width = width
        self.depth = depth

    @property
    def area(self) -> float:
        return self.width * self.depth

    @property
    def perimeter(self) -> float:
        return 2 * (self.width + self.depth)


class GeometryResolver:
    """Resolve grid references and levels for one project snapshot.

    Parameters
    ----------
    grid_x, grid_y:
        Grid lines along each axis.
    levels:
        Storey levels, in any order.
    """

    def __init__(
        self,
        grid_x: Iterable[GridLine],
        grid_y: Iterable[GridLine],
        levels: Iterable[Level],
    ) -> None:
        self._axes: dict[str, dict[str, float]] = {
            "X": {g.label: g.offset for g in grid_x},
            "Y": {g.label: g.offset for g in grid_y},
        }
        self._levels: dict[str, Level] = {lv.label: lv for lv in levels}
        self._ordered = sorted(self._levels.values(), key=lambda lv: lv.elevation)

    # ------------------------------------------------------------------
    # Grid
    # ------------------------------------------------------------------

    def offset(self, label: str, axis: str) -> float:
        """Return the offset of grid line *label* on *axis* ('X' or 'Y')."""
        try:
            return self._axes[axis][label]
        except KeyError:
            raise GeometryError(f"Grid line '{label}' not found on axis {axis}") from None

    def span(self, ref: str, axis: str) -> float:
        """Length of a span reference such as ``"A-B"``."""
        start, end = split_span(ref)
        return abs(self.offset(end, axis) - self.offset(start, axis))

    def area(self, x_ref: str, y_ref: str) -> float:
        return self.span(x_ref, "X") * self.span(y_ref, "Y")

    def rect(self, x_pair: tuple[str, str], y_pair: tuple[str, str]) -> Rect:
        """Rectangle between two X labels and two Y labels."""
        width = abs(self.offset(x_pair[1], "X") - self.offset(x_pair[0], "X"))
        depth = abs(self.offset(y_pair[1], "Y") - self.offset(y_pair[0], "Y"))
        return Rect(width, depth)

    def boundary_metrics(self, boundary: GridRectBoundary | PolygonBoundary) -> tuple[float, float]:
        """(area, perimeter) of a space or roof-plane boundary."""
        if isinstance(boundary, GridRectBoundary):
            r = self.rect(boundary.grid_x, boundary.grid_y)
            return r.area, r.perimeter
        return polygon_area(boundary.points), polygon_perimeter(boundary.points)

    # ------------------------------------------------------------------
    # Levels
    # ------------------------------------------------------------------

    def level(self, label: str) -> Level:
        try:
            return self._levels[label]
        except KeyError:
            raise GeometryError(f"Level '{label}' not found") from None

    def has_level(self, label: str) -> bool:
        return label in self._levels

    def next_level_above(self, label: str) -> Level | None:
        """The next level by ascending elevation, or None at the top."""
        current = self.level(label)
        for lv in self._ordered:
            if lv.elevation > current.elevation:
                return lv
        return None

    def level_height(self, start: str, end: str) -> float:
        """Height from *start* to *end*; must be strictly positive."""
        height = self.level(end).elevation - self.level(start).elevation
        if height <= 0:
            raise GeometryError(
                f"Level '{end}' must be above level '{start}' (height {height:g}m)"
            )
        return height

    def column_levels(self, start: str, end: str | None = None) -> tuple[Level, Level] | None:
        """Start and end level of a vertical element.

        An explicit *end* is validated; otherwise the next level above is
        used.  Returns None when *start* is the top level.
        """
        base = self.level(start)
        if end is not None:
            self.level_height(start, end)
            return base, self.level(end)
        above = self.next_level_above(start)
        if above is None:
            return None
        return base, above

    def storey_height(self, label: str, default: float = 3.0) -> float:
        """Height to the next level, or *default* on the top or unknown level."""
        if label not in self._levels:
            return default
        above = self.next_level_above(label)
        if above is None:
            return default
        return above.elevation - self._levels[label].elevation


def split_span(ref: str) -> tuple[str, str]:
    """Split ``"A-B"`` into ``("A", "B")``."""
    parts = [p.strip() for p in ref.split("-")]
    if len(parts) != 2 or not all(parts):
        raise GeometryError(f"Invalid grid span reference '{ref}'")
    return parts[0], parts[1]


def polygon_area(points: list[tuple[float, float]]) -> float:
    """Shoelace area of a simple polygon."""
    if len(points) < 3:
        return 0.0
    acc = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1]):
        acc += x1 * y2 - x2 * y1
    return abs(acc) / 2


def polygon_perimeter(points: list[tuple[float, float]]) -> float:
    if len(points) < 2:
        return 0.0
    return sum(
        math.hypot(x2 - x1, y2 - y1)
        for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1])
    )
