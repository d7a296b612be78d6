"""Tests for grid and level resolution.

Covers: GeometryResolver spans, areas, levels, storey heights and the
polygon helpers.
"""

from __future__ import annotations

import pytest

from boqkit.errors import GeometryError
from boqkit.geometry import GeometryResolver, polygon_area, polygon_perimeter, split_span
from boqkit.models.project import GridLine, GridRectBoundary, Level, PolygonBoundary


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolver() -> GeometryResolver:
    return GeometryResolver(
        grid_x=[GridLine(label="A", offset=0), GridLine(label="B", offset=4), GridLine(label="C", offset=10)],
        grid_y=[GridLine(label="1", offset=0), GridLine(label="2", offset=6)],
        # Deliberately unordered
        levels=[
            Level(label="L3", elevation=6.5),
            Level(label="L1", elevation=0.0),
            Level(label="L2", elevation=3.0),
        ],
    )


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

class TestGrid:
    def test_offset(self):
        assert _resolver().offset("C", "X") == pytest.approx(10.0)

    def test_unknown_grid_line(self):
        with pytest.raises(GeometryError, match="Grid line 'Z' not found on axis X"):
            _resolver().offset("Z", "X")

    def test_label_on_wrong_axis(self):
        with pytest.raises(GeometryError):
            _resolver().offset("A", "Y")

    def test_span_is_absolute(self):
        r = _resolver()
        assert r.span("A-B", "X") == pytest.approx(4.0)
        assert r.span("C-B", "X") == pytest.approx(6.0)

    def test_area(self):
        assert _resolver().area("A-C", "1-2") == pytest.approx(60.0)

    def test_invalid_span_reference(self):
        with pytest.raises(GeometryError, match="Invalid grid span reference"):
            split_span("A")

    def test_split_span(self):
        assert split_span(" A - B ") == ("A", "B")

    def test_rect_boundary_metrics(self):
        area, perimeter = _resolver().boundary_metrics(
            GridRectBoundary(grid_x=("A", "B"), grid_y=("1", "2"))
        )
        assert area == pytest.approx(24.0)
        assert perimeter == pytest.approx(20.0)

    def test_polygon_boundary_metrics(self):
        area, perimeter = _resolver().boundary_metrics(
            PolygonBoundary(points=[(0, 0), (4, 0), (4, 3), (0, 3)])
        )
        assert area == pytest.approx(12.0)
        assert perimeter == pytest.approx(14.0)


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

class TestLevels:
    def test_next_level_above_uses_elevation(self):
        r = _resolver()
        assert r.next_level_above("L1").label == "L2"
        assert r.next_level_above("L2").label == "L3"

    def test_top_level_has_nothing_above(self):
        assert _resolver().next_level_above("L3") is None

    def test_unknown_level(self):
        with pytest.raises(GeometryError, match="Level 'L9' not found"):
            _resolver().level("L9")

    def test_level_height(self):
        assert _resolver().level_height("L1", "L3") == pytest.approx(6.5)

    def test_level_height_must_be_positive(self):
        with pytest.raises(GeometryError):
            _resolver().level_height("L2", "L1")

    def test_column_levels_default_to_next_level(self):
        start, end = _resolver().column_levels("L1")
        assert (start.label, end.label) == ("L1", "L2")

    def test_column_levels_explicit_end(self):
        start, end = _resolver().column_levels("L1", "L3")
        assert end.elevation - start.elevation == pytest.approx(6.5)

    def test_column_levels_top_level(self):
        assert _resolver().column_levels("L3") is None

    def test_storey_height(self):
        r = _resolver()
        assert r.storey_height("L2") == pytest.approx(3.5)
        assert r.storey_height("L3", 3.0) == pytest.approx(3.0)
        assert r.storey_height("missing", 2.8) == pytest.approx(2.8)


# ---------------------------------------------------------------------------
# Polygons
# ---------------------------------------------------------------------------

class TestPolygons:
    def test_degenerate_polygon(self):
        assert polygon_area([(0, 0), (1, 1)]) == 0.0
        assert polygon_perimeter([(0, 0)]) == 0.0

    def test_winding_does_not_matter(self):
        cw = [(0, 0), (0, 3), (4, 3), (4, 0)]
        assert polygon_area(cw) == pytest.approx(12.0)
