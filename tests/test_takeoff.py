"""Tests for the element calculators and the TakeoffEngine."""

from __future__ import annotations

import math
from typing import Any

import pytest

from boqkit.calculators import ColumnCalculator, calculator_for, register_calculator
from boqkit.errors import CalculationError
from boqkit.models.takeoff import Trade
from boqkit.takeoff import TakeoffEngine, TakeoffReport


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _project(templates: list[dict[str, Any]], instances: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": "p1",
        "name": "Two-storey house",
        "grid_x": [{"label": "A", "offset": 0}, {"label": "B", "offset": 4}],
        "grid_y": [{"label": "1", "offset": 0}, {"label": "2", "offset": 6}],
        "levels": [{"label": "L1", "elevation": 0}, {"label": "L2", "elevation": 3}],
        "element_templates": templates,
        "element_instances": instances,
    }
    data.update(extra)
    return data


def _beam(**overrides: Any) -> dict[str, Any]:
    tpl = {"kind": "beam", "id": "tb", "name": "Beam 300x500", "width": 0.30, "height": 0.50}
    tpl.update(overrides)
    return tpl


def _instance(iid: str, template_id: str, grid_ref: list[str], level: str = "L1", **placement: Any) -> dict[str, Any]:
    return {
        "id": iid,
        "template_id": template_id,
        "placement": {"grid_ref": grid_ref, "level_id": level, **placement},
    }


def _takeoff(data: dict[str, Any]) -> TakeoffReport:
    return TakeoffEngine().generate_takeoff(data)


def _line(report: TakeoffReport, line_id: str):
    matches = [ln for ln in report.takeoff_lines if ln.id == line_id]
    assert matches, f"no takeoff line {line_id}"
    return matches[0]


# ---------------------------------------------------------------------------
# Beams
# ---------------------------------------------------------------------------

class TestBeam:
    def test_concrete_volume_with_waste(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A-B", "1"])]))
        line = _line(report, "tof_b1_concrete")
        assert line.quantity == pytest.approx(0.63)
        assert line.unit == "m³"
        assert line.trade == Trade.CONCRETE
        assert line.resource_key == "concrete-class-a"
        assert "Waste: 5%" in line.assumptions
        assert line.pay_item is None

    def test_beam_along_y(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A", "1-2"])]))
        line = _line(report, "tof_b1_concrete")
        assert line.inputs_snapshot["length"] == pytest.approx(6.0)

    def test_formwork(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A-B", "1"])]))
        line = _line(report, "tof_b1_formwork")
        assert line.quantity == pytest.approx(5.2)
        assert line.resource_key == "formwork-beam"
        assert line.pay_item is None

    def test_rebar_lines(self):
        tpl = _beam(rebar_config={
            "main_bars": {"diameter": 16, "count": 4},
            "stirrups": {"diameter": 10, "spacing": 0.15},
        })
        report = _takeoff(_project([tpl], [_instance("b1", "tb", ["A-B", "1"])]))
        main = _line(report, "tof_b1_rebar_main")
        ties = _line(report, "tof_b1_rebar_stirrups")
        assert main.quantity == pytest.approx(30.17)
        assert main.pay_item == "902 (1) a2"
        assert main.resource_key == "rebar-16mm"
        assert "Lap: 0.64m" in main.assumptions
        assert "Grade: 60" in main.assumptions
        assert ties.quantity == pytest.approx(29.18)
        assert ties.pay_item == "902 (1) a1"
        assert ties.classification.rebar_role == "stirrups"

    def test_explicit_rebar_item_applies_to_main_bars(self):
        tpl = _beam(rebar_config={
            "main_bars": {"diameter": 16, "count": 4},
            "stirrups": {"diameter": 10, "spacing": 0.15},
            "dpwh_rebar_item": "902 (1) a3",
        })
        report = _takeoff(_project([tpl], [_instance("b1", "tb", ["A-B", "1"])]))
        assert _line(report, "tof_b1_rebar_main").pay_item == "902 (1) a3"
        assert _line(report, "tof_b1_rebar_stirrups").pay_item == "902 (1) a1"

    def test_template_item_is_carried(self):
        report = _takeoff(_project(
            [_beam(dpwh_item_number="900 (1) c")],
            [_instance("b1", "tb", ["A-B", "1"])],
        ))
        line = _line(report, "tof_b1_concrete")
        assert line.pay_item == "900 (1) c"
        assert "DPWH Item: 900 (1) c" in line.assumptions
        assert "dpwh:900 (1) c" in line.tags

    def test_undeterminable_length(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A", "1"])]))
        assert report.takeoff_lines == []
        assert len(report.errors) == 1
        assert report.errors[0].startswith("Instance b1: Could not determine beam length")

    def test_invalid_dimensions(self):
        report = _takeoff(_project([_beam(width=0)], [_instance("b1", "tb", ["A-B", "1"])]))
        assert "invalid dimensions" in report.errors[0]

    def test_tags(self):
        data = _project([_beam()], [_instance("b1", "tb", ["A-B", "1"])])
        data["element_instances"][0]["tags"] = ["phase:1"]
        line = _line(_takeoff(data), "tof_b1_concrete")
        assert line.tags == ["type:beam", "template:Beam 300x500", "level:L1", "phase:1"]


# ---------------------------------------------------------------------------
# Slabs
# ---------------------------------------------------------------------------

class TestSlab:
    def test_slab_lines(self):
        tpl = {
            "kind": "slab", "id": "ts", "name": "S150", "thickness": 0.15,
            "rebar_config": {"main_bars": {"diameter": 12, "spacing": 0.2}},
        }
        report = _takeoff(_project([tpl], [_instance("s1", "ts", ["A-B", "1-2"])]))
        assert _line(report, "tof_s1_concrete").quantity == pytest.approx(3.78)
        assert _line(report, "tof_s1_formwork").quantity == pytest.approx(24.0)
        main = _line(report, "tof_s1_rebar_main")
        assert main.quantity == pytest.approx(135.19)
        assert main.pay_item == "902 (1) a1"

    def test_slab_needs_both_spans(self):
        tpl = {"kind": "slab", "id": "ts", "name": "S150", "thickness": 0.15}
        report = _takeoff(_project([tpl], [_instance("s1", "ts", ["A-B", "1"])]))
        assert len(report.errors) == 1
        assert "requires X and Y grid spans" in report.errors[0]


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

class TestColumn:
    def _column(self, section: dict[str, Any]) -> dict[str, Any]:
        return {"kind": "column", "id": "tc", "name": "C1", "section": section}

    def test_rectangular(self):
        tpl = self._column({"shape": "rectangular", "width": 0.4, "height": 0.4})
        report = _takeoff(_project([tpl], [_instance("c1", "tc", ["A", "1"])]))
        concrete = _line(report, "tof_c1_concrete")
        assert concrete.quantity == pytest.approx(0.504)
        assert "Height: L1 to L2 (3.00m)" in concrete.assumptions
        assert concrete.classification.subtype == "rectangular"
        assert _line(report, "tof_c1_formwork").quantity == pytest.approx(4.8)

    def test_circular(self):
        tpl = self._column({"shape": "circular", "diameter": 0.4})
        report = _takeoff(_project([tpl], [_instance("c1", "tc", ["A", "1"])]))
        assert _line(report, "tof_c1_concrete").quantity == pytest.approx(0.396)
        assert _line(report, "tof_c1_formwork").quantity == pytest.approx(round(math.pi * 1.2, 2))
        assert "subtype:circular" in _line(report, "tof_c1_concrete").tags

    def test_circular_ties_are_hoops(self):
        tpl = self._column({"shape": "circular", "diameter": 0.4})
        tpl["rebar_config"] = {"stirrups": {"diameter": 10, "spacing": 0.15}}
        report = _takeoff(_project([tpl], [_instance("c1", "tc", ["A", "1"])]))
        ties = _line(report, "tof_c1_rebar_ties")
        assert ties.formula_text.startswith("21 hoops")

    def test_top_floor_column_is_skipped(self):
        tpl = self._column({"shape": "rectangular", "width": 0.4, "height": 0.4})
        report = _takeoff(_project([tpl], [_instance("c9", "tc", ["A", "1"], level="L2")]))
        assert report.takeoff_lines == []
        assert report.errors == [
            "Instance c9: Column at level 'L2' skipped - no level above (top floor column)"
        ]

    def test_explicit_end_level(self):
        tpl = self._column({"shape": "rectangular", "width": 0.4, "height": 0.4})
        data = _project([tpl], [_instance("c1", "tc", ["A", "1"], end_level_id="L2")])
        data["levels"].append({"label": "L3", "elevation": 6})
        report = _takeoff(data)
        assert _line(report, "tof_c1_concrete").inputs_snapshot["height"] == pytest.approx(3.0)

    def test_end_level_below_start(self):
        tpl = self._column({"shape": "rectangular", "width": 0.4, "height": 0.4})
        report = _takeoff(_project([tpl], [_instance("c1", "tc", ["A", "1"], level="L2", end_level_id="L1")]))
        assert len(report.errors) == 1
        assert report.errors[0].startswith("Instance c1:")


# ---------------------------------------------------------------------------
# Foundations
# ---------------------------------------------------------------------------

class TestFoundation:
    def test_isolated_footing(self):
        tpl = {
            "kind": "foundation", "id": "tf", "name": "F1",
            "footing": {"form": "isolated", "length": 1.5, "width": 1.5, "depth": 0.5},
        }
        report = _takeoff(_project([tpl], [_instance("f1", "tf", ["A", "1"])]))
        assert _line(report, "tof_f1_concrete").quantity == pytest.approx(1.181)
        assert _line(report, "tof_f1_formwork").quantity == pytest.approx(3.0)
        assert _line(report, "tof_f1_formwork").resource_key == "formwork-footing"

    def test_mat(self):
        tpl = {"kind": "foundation", "id": "tm", "name": "Mat", "footing": {"form": "mat", "thickness": 0.5}}
        report = _takeoff(_project([tpl], [_instance("m1", "tm", ["A-B", "1-2"])]))
        assert _line(report, "tof_m1_concrete").quantity == pytest.approx(12.6)
        assert _line(report, "tof_m1_formwork").quantity == pytest.approx(10.0)

    def test_legacy_payload(self):
        tpl = {"id": "tf", "name": "F1", "type": "foundation",
               "properties": {"length": 1.5, "width": 1.5, "depth": 0.5}}
        report = _takeoff(_project([tpl], [_instance("f1", "tf", ["A", "1"])]))
        assert _line(report, "tof_f1_concrete").classification.subtype == "footing"


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class TestTakeoffEngine:
    def test_summary(self):
        report = _takeoff(_project(
            [_beam()],
            [_instance("b1", "tb", ["A-B", "1"]), _instance("b2", "tb", ["A-B", "2"])],
        ))
        s = report.summary
        assert s["total_concrete"] == pytest.approx(1.26)
        assert s["total_formwork"] == pytest.approx(10.4)
        assert s["total_rebar"] == 0
        assert s["element_count"] == 2
        assert s["takeoff_line_count"] == 4
        assert s["boq_line_count"] == 0

    def test_missing_template(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "nope", ["A-B", "1"])]))
        assert report.errors == ["Instance b1: template 'nope' not found"]

    def test_missing_level(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A-B", "1"], level="L9")]))
        assert report.errors == ["Instance b1: level 'L9' not found"]

    def test_failures_do_not_stop_the_batch(self):
        report = _takeoff(_project(
            [_beam()],
            [_instance("bad", "tb", ["A", "1"]), _instance("b1", "tb", ["A-B", "1"])],
        ))
        assert len(report.errors) == 1
        assert {ln.source_element_id for ln in report.takeoff_lines} == {"b1"}

    def test_empty_project(self):
        report = _takeoff(_project([], []))
        assert report.takeoff_lines == []
        assert report.errors == []
        assert report.summary["takeoff_line_count"] == 0

    def test_report_rendering(self):
        report = _takeoff(_project([_beam()], [_instance("b1", "tb", ["A-B", "1"])]))
        md = report.to_markdown()
        assert md.startswith("# Quantity Takeoff: p1")
        assert "tof_b1_concrete" in md
        data = report.to_dict()
        assert data["project_id"] == "p1"
        assert data["takeoff_lines"][0]["trade"] == "Concrete"
        assert '"total_concrete"' in report.to_json()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_lookup(self):
        assert isinstance(calculator_for("column"), ColumnCalculator)

    def test_unknown_kind(self):
        with pytest.raises(CalculationError):
            calculator_for("stair")

    def test_register_replaces(self):
        original = calculator_for("column")

        class _Custom(ColumnCalculator):
            pass

        try:
            register_calculator(_Custom())
            assert isinstance(calculator_for("column"), _Custom)
        finally:
            register_calculator(original)
