"""Tests for the project snapshot models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from boqkit.models.project import (
    BeamTemplate,
    CircularSection,
    ColumnTemplate,
    FoundationTemplate,
    IsolatedFooting,
    MatFooting,
    ProjectSnapshot,
    RectangularSection,
    parse_template,
)
from boqkit.models.takeoff import LineClassification


class TestParseTemplate:
    def test_tagged_form(self):
        tpl = parse_template({"kind": "beam", "id": "tb", "name": "B1", "width": 0.3, "height": 0.5})
        assert isinstance(tpl, BeamTemplate)
        assert tpl.width == pytest.approx(0.3)

    def test_legacy_circular_column(self):
        tpl = parse_template({"type": "column", "id": "c", "name": "C", "properties": {"diameter": 0.4}})
        assert isinstance(tpl, ColumnTemplate)
        assert isinstance(tpl.section, CircularSection)

    def test_legacy_rectangular_column(self):
        tpl = parse_template({"type": "column", "id": "c", "name": "C", "properties": {"width": 0.4, "height": 0.4}})
        assert isinstance(tpl.section, RectangularSection)

    def test_legacy_isolated_footing(self):
        tpl = parse_template({
            "type": "foundation", "id": "f", "name": "F",
            "properties": {"length": 1.5, "width": 1.5, "depth": 0.5},
        })
        assert isinstance(tpl, FoundationTemplate)
        assert isinstance(tpl.footing, IsolatedFooting)

    def test_legacy_mat(self):
        tpl = parse_template({"type": "foundation", "id": "f", "name": "F", "properties": {"thickness": 0.3}})
        assert isinstance(tpl.footing, MatFooting)

    def test_legacy_rebar_keys(self):
        tpl = parse_template({
            "type": "beam", "id": "b", "name": "B",
            "properties": {"width": 0.3, "height": 0.5},
            "rebarConfig": {"mainBars": {"diameter": 16, "count": 4}, "dpwhRebarItem": "902 (1) a2"},
        })
        assert tpl.rebar_config.main_bars.count == 4
        assert tpl.rebar_config.dpwh_rebar_item == "902 (1) a2"

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown template type"):
            parse_template({"type": "stair", "id": "s", "name": "S"})


class TestProjectSnapshot:
    def test_duplicate_grid_labels(self):
        with pytest.raises(ValidationError, match="Duplicate grid X labels: A"):
            ProjectSnapshot.model_validate({
                "grid_x": [{"label": "A", "offset": 0}, {"label": "A", "offset": 4}],
            })

    def test_duplicate_levels(self):
        with pytest.raises(ValidationError, match="Duplicate level labels"):
            ProjectSnapshot.model_validate({
                "levels": [{"label": "L1", "elevation": 0}, {"label": "L1", "elevation": 3}],
            })

    def test_legacy_templates_in_snapshot(self):
        project = ProjectSnapshot.model_validate({
            "element_templates": [{"type": "slab", "id": "s", "name": "S", "properties": {"thickness": 0.15}}],
        })
        assert project.template("s").kind == "slab"
        assert project.template("missing") is None

    def test_default_settings(self):
        project = ProjectSnapshot()
        assert project.settings.waste.concrete == pytest.approx(0.05)
        assert project.settings.rounding.concrete == 3


class TestLineClassification:
    def test_tag_order(self):
        cls = LineClassification(
            element_type="beam",
            template="Beam 300x500",
            level="L1",
            rebar_role="main",
            extra=["phase:1", "level:L1"],
        )
        assert cls.to_tags("902 (1) a2") == [
            "type:beam",
            "template:Beam 300x500",
            "level:L1",
            "rebar:main",
            "dpwh:902 (1) a2",
            "phase:1",
        ]

    def test_empty(self):
        assert LineClassification().to_tags() == []
