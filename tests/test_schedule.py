"""Tests for directly counted schedule items."""

from __future__ import annotations

import pytest

from boqkit.models.project import ProjectSnapshot, ScheduleItem
from boqkit.models.takeoff import Trade
from boqkit.schedule.calculator import calculate_schedule_items, schedule_item_line, trade_for_category


class TestTradeForCategory:
    @pytest.mark.parametrize(
        "category, trade",
        [
            ("earthworks-excavation", Trade.EARTHWORK),
            ("earthworks-backfill", Trade.EARTHWORK),
            ("termite-control", Trade.EARTHWORK),
            ("doors", Trade.DOORS_WINDOWS),
            ("windows", Trade.DOORS_WINDOWS),
            ("plumbing", Trade.PLUMBING),
            ("hardware", Trade.HARDWARE),
            ("glazing", Trade.GLAZING),
            ("something-else", Trade.OTHER),
        ],
    )
    def test_mapping(self, category, trade):
        assert trade_for_category(category) == trade


class TestScheduleItems:
    def test_pass_through_line(self):
        item = ScheduleItem(
            id="d1", category="doors", dpwh_item_number_raw="1010 (2) a",
            unit="Square Meter", qty=3.78, basis_note="2 doors @ 0.9 x 2.1",
        )
        line = schedule_item_line(item)
        assert line.id == "tof_sched_d1"
        assert line.trade == Trade.DOORS_WINDOWS
        assert line.quantity == pytest.approx(3.78)
        assert line.pay_item == "1010 (2) a"
        assert line.assumptions == ["2 doors @ 0.9 x 2.1"]
        assert "category:doors" in line.tags

    def test_negative_quantity_rejected(self):
        project = ProjectSnapshot.model_validate({
            "schedule_items": [
                {"id": "x1", "category": "hardware", "dpwh_item_number_raw": "1011 (1)", "unit": "Set", "qty": -1},
                {"id": "x2", "category": "hardware", "dpwh_item_number_raw": "1011 (1)", "unit": "Set", "qty": 4},
            ],
        })
        result = calculate_schedule_items(project)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Schedule item x1")
        assert [ln.id for ln in result.takeoff_lines] == ["tof_sched_x2"]
        assert result.summary == {"total_items": 1, "by_category": {"hardware": 1}}
