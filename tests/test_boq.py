"""Tests for BOQ mapping: grouping, fallbacks, tags and error reporting."""

from __future__ import annotations

from typing import Any

import pytest

from boqkit.boq import BOQMapper, BOQReport, resolve_pay_item
from boqkit.catalog import Catalog, CatalogItem
from boqkit.errors import InvalidRequestError
from boqkit.models.project import ProjectSnapshot
from boqkit.models.takeoff import LineClassification, TakeoffLine, Trade
from boqkit.takeoff import TakeoffEngine


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _line(lid: str, trade: Trade, quantity: float, pay_item: str | None = None,
          source: str = "e1", **cls: Any) -> TakeoffLine:
    return TakeoffLine(
        id=lid,
        source_element_id=source,
        trade=trade,
        resource_key="r",
        quantity=quantity,
        unit="u",
        pay_item=pay_item,
        classification=LineClassification(**cls),
    )


def _two_beam_project() -> ProjectSnapshot:
    return ProjectSnapshot.model_validate({
        "id": "p1",
        "grid_x": [{"label": "A", "offset": 0}, {"label": "B", "offset": 4}],
        "grid_y": [{"label": "1", "offset": 0}, {"label": "2", "offset": 6}],
        "levels": [{"label": "L1", "elevation": 0}, {"label": "L2", "elevation": 3}],
        "element_templates": [
            {"kind": "beam", "id": "tb", "name": "Beam 300x500", "width": 0.3, "height": 0.5,
             "rebar_config": {"main_bars": {"diameter": 16, "count": 4},
                              "stirrups": {"diameter": 10, "spacing": 0.15}}},
        ],
        "element_instances": [
            {"id": "b1", "template_id": "tb", "placement": {"grid_ref": ["A-B", "1"], "level_id": "L1"}},
            {"id": "b2", "template_id": "tb", "placement": {"grid_ref": ["A-B", "2"], "level_id": "L1"}},
        ],
    })


def _catalog_without(*numbers: str) -> Catalog:
    return Catalog(item for item in Catalog.default().search(limit=5000) if item.item_number not in numbers)


# ---------------------------------------------------------------------------
# Pay-item resolution
# ---------------------------------------------------------------------------

class TestResolvePayItem:
    def test_explicit_wins(self):
        assert resolve_pay_item(Trade.CONCRETE, "900 (1) c", "900 (1) a") == ("900 (1) c", None)

    def test_default_with_warning(self):
        item, warning = resolve_pay_item(Trade.CONCRETE, None, "900 (1) a", 'Template "B1"')
        assert item == "900 (1) a"
        assert warning == 'Template "B1" has no DPWH item assigned, using default (900 (1) a)'

    def test_nothing_available(self):
        assert resolve_pay_item(Trade.FINISHES, None, None) == (None, None)


# ---------------------------------------------------------------------------
# Core trades
# ---------------------------------------------------------------------------

class TestCoreTrades:
    def test_two_beams_one_concrete_line_one_warning(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)

        concrete = [ln for ln in report.boq_lines if ln.trade == Trade.CONCRETE]
        assert len(concrete) == 1
        assert concrete[0].dpwh_item_number_raw == "900 (1) a"
        assert concrete[0].quantity == pytest.approx(1.26)
        assert concrete[0].unit == "cu.m"
        assert concrete[0].id == "boq_900__1__a"
        assert concrete[0].source_takeoff_line_ids == ["tof_b1_concrete", "tof_b2_concrete"]

        concrete_warnings = [w for w in report.warnings if "Template" in w]
        assert concrete_warnings == [
            'Template "Beam 300x500" has no DPWH item assigned, using default (900 (1) a)'
        ]
        assert report.errors == []

    def test_rebar_groups_by_line_item(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)
        rebar = {ln.dpwh_item_number_raw: ln for ln in report.boq_lines if ln.trade == Trade.REBAR}
        assert set(rebar) == {"902 (1) a2", "902 (1) a1"}
        assert rebar["902 (1) a2"].unit == "kg"
        assert "rebar-types:2 main" in rebar["902 (1) a2"].tags
        assert "elements:2 beam" in rebar["902 (1) a2"].tags

    def test_formwork_uses_default_silently(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)
        formwork = [ln for ln in report.boq_lines if ln.trade == Trade.FORMWORK]
        assert len(formwork) == 1
        assert formwork[0].dpwh_item_number_raw == "903 (1)"
        assert formwork[0].quantity == pytest.approx(10.4)
        assert not any("formwork" in w.lower() for w in report.warnings)

    def test_template_item_from_project(self):
        lines = [_line("l1", Trade.CONCRETE, 1.0, template_id="tb", template="Beam 300x500", element_type="beam")]
        project = _two_beam_project()
        project.element_templates[0].dpwh_item_number = "900 (1) c"
        report = BOQMapper().generate_boq(lines, project)
        assert report.boq_lines[0].dpwh_item_number_raw == "900 (1) c"
        assert report.warnings == []

    def test_rebar_without_item_uses_default(self):
        lines = [_line("l1", Trade.REBAR, 10.0, template="Slab", rebar_role="main")]
        report = BOQMapper().generate_boq(lines)
        assert report.boq_lines[0].dpwh_item_number_raw == "902 (1) a2"
        assert report.warnings == ['Rebar for template "Slab" has no DPWH item assigned, using default (902 (1) a2)']

    def test_missing_formwork_default(self):
        lines = [_line("l1", Trade.FORMWORK, 5.0), _line("l2", Trade.CONCRETE, 1.0, "900 (1) a")]
        report = BOQMapper(_catalog_without("903 (1)")).generate_boq(lines)
        assert report.warnings == ["Default formwork item not found in DPWH catalog - formwork will be skipped"]
        assert [ln.trade for ln in report.boq_lines] == [Trade.CONCRETE]

    def test_missing_concrete_default_is_error(self):
        lines = [_line("l1", Trade.CONCRETE, 1.0), _line("l2", Trade.CONCRETE, 2.0, "900 (1) b")]
        report = BOQMapper(_catalog_without("900 (1) a")).generate_boq(lines)
        assert len(report.errors) == 1
        assert report.boq_lines[0].dpwh_item_number_raw == "900 (1) b"
        assert report.boq_lines[0].source_takeoff_line_ids == ["l2"]

    def test_template_item_from_another_trade_is_error(self):
        project = _two_beam_project()
        project.element_templates[0].dpwh_item_number = "902 (1) a2"
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)

        assert [ln for ln in report.boq_lines if ln.trade == Trade.CONCRETE] == []
        assert report.errors == [
            "DPWH item 902 (1) a2 is a Rebar item, not Concrete - 2 takeoff line(s) excluded"
        ]
        rebar = report.line_for("902 (1) a2")
        assert rebar is not None and rebar.trade == Trade.REBAR
        ids = [ln.id for ln in report.boq_lines]
        assert len(ids) == len(set(ids))

    def test_rebar_line_with_concrete_item_is_error(self):
        report = BOQMapper().generate_boq([_line("r1", Trade.REBAR, 5.0, "900 (1) a")])
        assert report.boq_lines == []
        assert report.errors == ["DPWH item 900 (1) a is a Concrete item, not Rebar - 1 takeoff line(s) excluded"]

    def test_default_from_another_trade_is_error(self):
        lines = [_line("l1", Trade.CONCRETE, 1.0)]
        report = BOQMapper(concrete_default="903 (1)").generate_boq(lines)
        assert report.boq_lines == []
        assert len(report.errors) == 1
        assert report.errors[0].startswith("Default concrete item 903 (1) not found")


# ---------------------------------------------------------------------------
# Other trades
# ---------------------------------------------------------------------------

class TestOtherTrades:
    def test_finishes_grouping_and_tags(self):
        lines = [
            _line("f1", Trade.FINISHES, 50.4, "1018 (2)", source="s1", element_type="finish",
                  space_name="Living", category="floor"),
            _line("f2", Trade.FINISHES, 20.0, "1018 (2)", source="s2", element_type="finish",
                  space_name="Kitchen", category="floor"),
        ]
        report = BOQMapper().generate_boq(lines)
        line = report.boq_lines[0]
        assert line.id == "boq_1018__2__finishes"
        assert line.quantity == pytest.approx(70.4)
        assert line.unit == "Square Meter"
        assert "spaces:1× Living, 1× Kitchen" in line.tags
        assert "categories:2× floor" in line.tags
        assert not any(t.startswith("space:") for t in line.tags)

    def test_roofing_line(self):
        lines = [_line("r1", Trade.ROOFING, 69.3, "1014 (1) b", source="rp1", element_type="roof", roof_plane="Main")]
        line = BOQMapper().generate_boq(lines).boq_lines[0]
        assert line.id == "boq_1014__1__b_roofing"
        assert "roofPlanes:1× Main" in line.tags

    def test_structural_steel_line(self):
        lines = [_line("t1", Trade.STRUCTURAL_STEEL, 812.5, "1047 (8) a", source="truss-design",
                       element_type="truss", category="truss_steel")]
        report = BOQMapper().generate_boq(lines)
        assert report.boq_lines[0].id == "boq_1047__8__a_steel"
        assert report.summary["trades"]["StructuralSteel"] == 1

    def test_schedule_line(self):
        lines = [_line("d1", Trade.DOORS_WINDOWS, 3.78, "1010 (2) a", source="d1",
                       element_type="schedule", category="doors")]
        report = BOQMapper().generate_boq(lines)
        assert report.boq_lines[0].id == "boq_1010__2__a_schedule_doors___windows"
        assert report.summary["trades"]["ScheduleItems"] == 1

    def test_line_without_item_is_skipped(self):
        report = BOQMapper().generate_boq([_line("f1", Trade.FINISHES, 1.0)])
        assert report.boq_lines == []
        assert report.warnings == ["Takeoff line f1 has no DPWH item - skipped"]

    def test_unknown_item_is_error(self):
        report = BOQMapper().generate_boq([_line("x1", Trade.REBAR, 5.0, "999 (9)")])
        assert report.boq_lines == []
        assert report.errors == ["DPWH item 999 (9) (Rebar) not found in catalog - 1 takeoff line(s) excluded"]


# ---------------------------------------------------------------------------
# Invariants
# ---------------------------------------------------------------------------

class TestInvariants:
    def test_sum_consistency(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)
        by_id = {ln.id: ln for ln in takeoff.takeoff_lines}
        for boq_line in report.boq_lines:
            total = sum(by_id[i].quantity for i in boq_line.source_takeoff_line_ids)
            assert boq_line.quantity == pytest.approx(total, abs=0.01)

    def test_every_takeoff_line_used_once(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)
        used = [i for ln in report.boq_lines for i in ln.source_takeoff_line_ids]
        assert sorted(used) == sorted(ln.id for ln in takeoff.takeoff_lines)

    def test_idempotent(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        mapper = BOQMapper()
        first = mapper.generate_boq(takeoff.takeoff_lines, project)
        second = mapper.generate_boq(takeoff.takeoff_lines, project)
        assert first.to_dict() == second.to_dict()

    def test_accepts_serialized_lines(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        dumped = [ln.model_dump(mode="json") for ln in takeoff.takeoff_lines]
        report = BOQMapper().generate_boq(dumped, project)
        assert len(report.boq_lines) == 4

    def test_summary(self):
        project = _two_beam_project()
        takeoff = TakeoffEngine().generate_takeoff(project)
        report = BOQMapper().generate_boq(takeoff.takeoff_lines, project)
        assert report.summary["total_lines"] == 4
        assert report.summary["trades"]["Concrete"] == 1
        assert report.summary["trades"]["Rebar"] == 2
        assert report.summary["trades"]["Formwork"] == 1


# ---------------------------------------------------------------------------
# Request validation and reports
# ---------------------------------------------------------------------------

class TestRequests:
    def test_not_a_list(self):
        with pytest.raises(InvalidRequestError, match="takeoff_lines must be a list"):
            BOQMapper().generate_boq({"lines": []})

    def test_invalid_element(self):
        with pytest.raises(InvalidRequestError, match=r"takeoff_lines\[0\]"):
            BOQMapper().generate_boq([{"id": "x"}])

    def test_empty(self):
        report = BOQMapper().generate_boq([])
        assert report.boq_lines == []
        assert report.warnings == ["No takeoff lines to process"]
        assert report.summary["total_lines"] == 0

    def test_custom_catalog(self):
        catalog = Catalog([CatalogItem(item_number="X-1", description="Custom", unit="Lot", trade="Other")])
        report = BOQMapper(catalog).generate_boq([_line("o1", Trade.OTHER, 1.0, "X-1")])
        assert report.boq_lines[0].description == "Custom"
        assert report.boq_lines[0].unit == "Lot"

    def test_report_rendering(self):
        report = BOQMapper().generate_boq([_line("r1", Trade.REBAR, 12.345, "902 (1) a2")])
        assert isinstance(report, BOQReport)
        assert report.boq_lines[0].quantity == pytest.approx(12.35)
        md = report.to_markdown()
        assert md.startswith("# Bill of Quantities")
        assert "902 (1) a2" in md
        assert report.line_for("902 (1) a2") is report.boq_lines[0]
        assert '"boq_lines"' in report.to_json()
