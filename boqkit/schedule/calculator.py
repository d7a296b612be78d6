"""Schedule items: directly counted quantities passed through to the takeoff."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from pydantic import BaseModel, Field

from boqkit.calculators.base import fmt_num
from boqkit.models.project import ProjectSnapshot, ScheduleItem
from boqkit.models.takeoff import LineClassification, TakeoffLine, Trade

logger = logging.getLogger(__name__)

CATEGORY_TRADES: dict[str, Trade] = {
    "termite-control": Trade.EARTHWORK,
    "drainage": Trade.PLUMBING,
    "plumbing": Trade.PLUMBING,
    "carpentry": Trade.CARPENTRY,
    "hardware": Trade.HARDWARE,
    "doors": Trade.DOORS_WINDOWS,
    "windows": Trade.DOORS_WINDOWS,
    "glazing": Trade.GLAZING,
    "waterproofing": Trade.WATERPROOFING,
    "cladding": Trade.CLADDING,
    "insulation": Trade.FINISHES,
    "acoustical": Trade.FINISHES,
}


class ScheduleResult(BaseModel):
    takeoff_lines: list[TakeoffLine] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)


def trade_for_category(category: str) -> Trade:
    """Trade of a schedule category; any ``earthworks-*`` category is Earthwork."""
    if category.startswith("earthworks"):
        return Trade.EARTHWORK
    return CATEGORY_TRADES.get(category, Trade.OTHER)


def schedule_item_line(item: ScheduleItem) -> TakeoffLine:
    """Pass-through line carrying the item's own quantity and pay item."""
    assumptions = [item.basis_note] if item.basis_note else []
    if item.description_override:
        assumptions.append(f"Description: {item.description_override}")
    return TakeoffLine(
        id=f"tof_sched_{item.id}",
        source_element_id=item.id,
        trade=trade_for_category(item.category),
        resource_key=f"schedule-{item.category}",
        quantity=item.qty,
        unit=item.unit,
        formula_text=f"Direct quantity: {fmt_num(item.qty)} {item.unit}",
        inputs_snapshot={"qty": item.qty, "category": item.category},
        assumptions=assumptions,
        classification=LineClassification(
            element_type="schedule",
            category=item.category,
            extra=list(item.tags),
        ),
        pay_item=item.dpwh_item_number_raw,
    )


def calculate_schedule_items(project: ProjectSnapshot) -> ScheduleResult:
    lines: list[TakeoffLine] = []
    errors: list[str] = []
    for item in project.schedule_items:
        if item.qty < 0:
            errors.append(f"Schedule item {item.id}: quantity cannot be negative ({fmt_num(item.qty)})")
            continue
        lines.append(schedule_item_line(item))

    by_category = Counter(item.category for item in project.schedule_items if item.qty >= 0)
    return ScheduleResult(
        takeoff_lines=lines,
        errors=errors,
        summary={"total_items": len(lines), "by_category": dict(by_category)},
    )
