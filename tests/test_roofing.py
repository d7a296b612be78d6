"""Tests for roof covering takeoff and roofing pay-item defaults."""

from __future__ import annotations

import math
from typing import Any

import pytest

from boqkit.errors import CalculationError
from boqkit.models.project import ProjectSnapshot, RoofSlope
from boqkit.models.takeoff import Trade
from boqkit.roofing import DEFAULT_ROOFING_ITEMS, calculate_roofing, roofing_item, slope_factor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _project(planes: list[dict[str, Any]] | None = None, roof_types: list[dict[str, Any]] | None = None) -> ProjectSnapshot:
    if roof_types is None:
        roof_types = [{
            "id": "rt1",
            "name": "Long span 0.5mm",
            "dpwh_item_number_raw": "1014 (1) b",
            "lap_allowance_percent": 0.10,
            "waste_percent": 0.05,
        }]
    if planes is None:
        planes = [_plane("rp1", "Main", {"mode": "ratio", "value": 0.75})]
    return ProjectSnapshot.model_validate({
        "id": "p1",
        "grid_x": [{"label": "A", "offset": 0}, {"label": "B", "offset": 8}],
        "grid_y": [{"label": "1", "offset": 0}, {"label": "2", "offset": 6}],
        "levels": [{"label": "RF", "elevation": 6}],
        "roof_types": roof_types,
        "roof_planes": planes,
    })


def _plane(pid: str, name: str, slope: dict[str, Any], roof_type_id: str = "rt1") -> dict[str, Any]:
    return {
        "id": pid,
        "name": name,
        "level_id": "RF",
        "boundary": {"kind": "gridRect", "grid_x": ["A", "B"], "grid_y": ["1", "2"]},
        "slope": slope,
        "roof_type_id": roof_type_id,
    }


# ---------------------------------------------------------------------------
# Slope factor
# ---------------------------------------------------------------------------

class TestSlopeFactor:
    def test_ratio(self):
        assert slope_factor(RoofSlope(mode="ratio", value=0.75)) == pytest.approx(1.25)

    def test_degrees(self):
        assert slope_factor(RoofSlope(mode="degrees", value=30)) == pytest.approx(1 / math.cos(math.radians(30)))

    def test_flat(self):
        assert slope_factor(RoofSlope(mode="degrees", value=0)) == pytest.approx(1.0)

    def test_vertical_rejected(self):
        with pytest.raises(CalculationError):
            slope_factor(RoofSlope(mode="degrees", value=90))

    def test_negative_ratio_rejected(self):
        with pytest.raises(CalculationError):
            slope_factor(RoofSlope(mode="ratio", value=-0.1))


# ---------------------------------------------------------------------------
# Roof planes
# ---------------------------------------------------------------------------

class TestRoofPlanes:
    def test_slope_area_with_lap_and_waste(self):
        project = _project()
        result = calculate_roofing(project)
        line = result.takeoff_lines[0]
        assert line.id == "tof_roof_rp1"
        assert line.trade == Trade.ROOFING
        assert line.quantity == pytest.approx(69.3)
        assert line.pay_item == "1014 (1) b"
        assert "roofPlane:Main" in line.tags
        assert result.summary["total_roof_area"] == pytest.approx(60.0)

    def test_computed_geometry_is_refreshed(self):
        project = _project()
        calculate_roofing(project)
        geom = project.roof_planes[0].computed
        assert geom.plan_area_m2 == pytest.approx(48.0)
        assert geom.slope_factor == pytest.approx(1.25)
        assert geom.slope_area_m2 == pytest.approx(60.0)

    def test_plan_area_basis(self):
        project = _project(roof_types=[{
            "id": "rt1", "name": "Flat", "dpwh_item_number_raw": "1013 (1)", "area_basis": "planArea",
        }])
        assert calculate_roofing(project).takeoff_lines[0].quantity == pytest.approx(48.0)

    def test_no_planes(self):
        result = calculate_roofing(_project(planes=[]))
        assert result.takeoff_lines == []
        assert result.errors == []
        assert result.summary["total_roof_area"] == 0.0

    def test_no_roof_types(self):
        result = calculate_roofing(_project(roof_types=[]))
        assert result.errors == ["No roof types defined"]

    def test_unknown_roof_type(self):
        project = _project(planes=[
            _plane("rp1", "Main", {"value": 0.5}, roof_type_id="missing"),
            _plane("rp2", "Porch", {"value": 0.5}),
        ])
        result = calculate_roofing(project)
        assert result.errors == ['Roof plane "Main": roof type not found (missing)']
        assert [ln.id for ln in result.takeoff_lines] == ["tof_roof_rp2"]

    def test_invalid_slope_is_recorded(self):
        project = _project(planes=[_plane("rp1", "Main", {"mode": "degrees", "value": 95})])
        result = calculate_roofing(project)
        assert result.takeoff_lines == []
        assert result.errors[0].startswith('Roof plane "Main":')


# ---------------------------------------------------------------------------
# Default pay items
# ---------------------------------------------------------------------------

class TestRoofingItems:
    def test_defaults(self):
        assert roofing_item("truss_steel") == "1047 (8) a"
        assert roofing_item("ridge_cap") == "1013 (2) a"

    def test_override(self):
        assert roofing_item("truss_steel", {"truss_steel": "1047 (8) b"}) == "1047 (8) b"

    def test_blank_override_ignored(self):
        assert roofing_item("bolts_and_rods", {"bolts_and_rods": ""}) == "1047 (5) a"

    def test_every_default_is_in_catalog(self):
        from boqkit.catalog import Catalog

        catalog = Catalog.default()
        for item, _, _ in DEFAULT_ROOFING_ITEMS.values():
            assert item in catalog
