"""Finishing works: floor, ceiling and wall finishes per space and wall surface."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from boqkit import config
from boqkit.calculators.base import fmt_num, round_quantity, waste_pct
from boqkit.errors import BoqKitError
from boqkit.geometry.resolver import GeometryResolver
from boqkit.models.project import (
    FinishType,
    Opening,
    ProjectSnapshot,
    Space,
    SpaceFinishAssignment,
    WallSurface,
    WallSurfaceAssignment,
)
from boqkit.models.takeoff import LineClassification, TakeoffLine, Trade

logger = logging.getLogger(__name__)

WALL_CATEGORIES = ("wall", "plaster", "paint")


class FinishesResult(BaseModel):
    takeoff_lines: list[TakeoffLine] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)


def calculate_finishes(project: ProjectSnapshot, resolver: GeometryResolver | None = None) -> FinishesResult:
    """Takeoff lines for every space and wall-surface finish assignment, in order."""
    resolver = resolver or GeometryResolver(project.grid_x, project.grid_y, project.levels)
    spaces = {s.id: s for s in project.spaces}
    finish_types = {f.id: f for f in project.finish_types}

    lines: list[TakeoffLine] = []
    errors: list[str] = []
    totals = {"floor": 0.0, "wall": 0.0, "ceiling": 0.0}

    for assignment in project.space_finish_assignments:
        space = spaces.get(assignment.space_id)
        if space is None:
            errors.append(f"Space {assignment.space_id} not found for assignment {assignment.id}")
            continue
        finish = finish_types.get(assignment.finish_type_id)
        if finish is None:
            errors.append(f"Finish type {assignment.finish_type_id} not found for assignment {assignment.id}")
            continue
        try:
            if finish.category == "floor":
                line = _floor_line(space, finish, assignment, resolver)
                totals["floor"] += line.quantity
            elif finish.category == "ceiling":
                line = _ceiling_line(space, finish, assignment, resolver)
                totals["ceiling"] += line.quantity
            elif finish.category in WALL_CATEGORIES:
                openings = [
                    o for o in project.openings
                    if o.level_id == space.level_id and (not o.space_id or o.space_id == space.id)
                ]
                line = _wall_line(space, finish, assignment, openings, resolver)
                totals["wall"] += line.quantity
            else:
                errors.append(f"Unknown finish category: {finish.category} for finish type {finish.id}")
                continue
        except BoqKitError as exc:
            errors.append(f"Error processing assignment {assignment.id}: {exc}")
            continue
        lines.append(line)

    surfaces = {w.id: w for w in project.wall_surfaces}
    for wall_assignment in project.wall_surface_assignments:
        surface = surfaces.get(wall_assignment.wall_surface_id)
        if surface is None:
            errors.append(
                f"Wall surface {wall_assignment.wall_surface_id} not found for assignment {wall_assignment.id}"
            )
            continue
        finish = finish_types.get(wall_assignment.finish_type_id)
        if finish is None:
            errors.append(
                f"Finish type {wall_assignment.finish_type_id} not found for assignment {wall_assignment.id}"
            )
            continue
        if finish.category not in WALL_CATEGORIES:
            errors.append(
                f"Finish type {finish.id} ({finish.category}) cannot be applied to wall surface {surface.id}"
            )
            continue
        try:
            line = _wall_surface_line(surface, finish, wall_assignment, resolver)
        except BoqKitError as exc:
            errors.append(f"Error processing assignment {wall_assignment.id}: {exc}")
            continue
        totals["wall"] += line.quantity
        lines.append(line)

    logger.debug("Finishes: %d lines, %d errors", len(lines), len(errors))
    return FinishesResult(
        takeoff_lines=lines,
        errors=errors,
        summary={
            "total_floor_area": round_quantity(totals["floor"], 2),
            "total_wall_area": round_quantity(totals["wall"], 2),
            "total_ceiling_area": round_quantity(totals["ceiling"], 2),
            "finish_line_count": len(lines),
        },
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _waste(finish: FinishType, override: float | None) -> float:
    return finish.assumptions.waste_percent if override is None else override


def _space_line(space: Space, finish: FinishType, assignment: SpaceFinishAssignment,
                quantity: float, formula: str, inputs: dict[str, Any],
                assumptions: list[str]) -> TakeoffLine:
    if finish.assumptions.notes:
        assumptions = assumptions + [finish.assumptions.notes]
    return TakeoffLine(
        id=f"tof_finish_{assignment.id}",
        source_element_id=space.id,
        trade=Trade.FINISHES,
        resource_key=f"finish-{finish.id}",
        quantity=round_quantity(quantity, finish.assumptions.rounding),
        unit=finish.unit,
        formula_text=formula,
        inputs_snapshot=inputs,
        assumptions=assumptions,
        classification=LineClassification(
            element_type="finish",
            level=space.level_id,
            space_name=space.name,
            category=finish.category,
            extra=list(space.tags),
        ),
        pay_item=finish.dpwh_item_number_raw,
    )


def _floor_line(space: Space, finish: FinishType, assignment: SpaceFinishAssignment,
                resolver: GeometryResolver) -> TakeoffLine:
    area, _ = resolver.boundary_metrics(space.boundary)
    waste = _waste(finish, assignment.overrides.waste_percent)
    qty = area * (1 + waste)
    return _space_line(
        space, finish, assignment, qty,
        f"Floor area {fmt_num(area)} m² × (1 + {fmt_num(waste)}) = {fmt_num(qty, 2)} m²",
        {"area": area, "waste": waste},
        [f"{finish.finish_name} on {space.name}", f"Waste: {waste_pct(waste)}"],
    )


def _ceiling_line(space: Space, finish: FinishType, assignment: SpaceFinishAssignment,
                  resolver: GeometryResolver) -> TakeoffLine:
    area, _ = resolver.boundary_metrics(space.boundary)
    waste = _waste(finish, assignment.overrides.waste_percent)
    if space.metadata.get("isOpenToBelow") == "true":
        return _space_line(
            space, finish, assignment, 0.0,
            "Space open to below: no ceiling = 0 m²",
            {"area": area, "open_to_below": True},
            [f"{finish.finish_name} on {space.name}", "Open to below - ceiling excluded"],
        )
    qty = area * (1 + waste)
    return _space_line(
        space, finish, assignment, qty,
        f"Ceiling area {fmt_num(area)} m² × (1 + {fmt_num(waste)}) = {fmt_num(qty, 2)} m²",
        {"area": area, "waste": waste},
        [f"{finish.finish_name} on {space.name}", f"Waste: {waste_pct(waste)}"],
    )


def _wall_height(finish: FinishType, override: float | None, storey: float) -> tuple[float, str]:
    if override is not None:
        return override, "override"
    rule = finish.wall_height_rule
    if rule.mode == "fixed" and rule.value_m is not None:
        return rule.value_m, "fixed"
    return storey, "full height"


def _deductible(opening: Opening, finish: FinishType) -> bool:
    rule = finish.deduction_rule
    if not rule.enabled or opening.type not in rule.include_types:
        return False
    return opening.width_m * opening.height_m >= rule.min_opening_area_to_deduct_m2


def _wall_line(space: Space, finish: FinishType, assignment: SpaceFinishAssignment,
               openings: list[Opening], resolver: GeometryResolver) -> TakeoffLine:
    _, perimeter = resolver.boundary_metrics(space.boundary)
    storey = resolver.storey_height(space.level_id, config.DEFAULT_STOREY_HEIGHT_M)
    height, basis = _wall_height(finish, assignment.overrides.height_m, storey)
    gross = perimeter * height
    deducted = [o for o in openings if _deductible(o, finish)]
    deduction = sum(o.area_m2 for o in deducted)
    net = max(0.0, gross - deduction)
    waste = _waste(finish, assignment.overrides.waste_percent)
    qty = net * (1 + waste)
    formula = f"Perimeter {fmt_num(perimeter)} m × {fmt_num(height)} m = {fmt_num(gross, 2)} m²"
    if deduction:
        formula += f" - openings {fmt_num(deduction, 2)} m² = {fmt_num(net, 2)} m²"
    if waste:
        formula += f" × (1 + {fmt_num(waste)}) = {fmt_num(qty, 2)} m²"
    return _space_line(
        space, finish, assignment, qty, formula,
        {
            "perimeter": perimeter,
            "height": height,
            "gross_area": gross,
            "openings_deducted": [o.id for o in deducted],
            "deduction_area": deduction,
            "waste": waste,
        },
        [
            f"{finish.finish_name} on {space.name}",
            f"Height: {fmt_num(height)}m ({basis})",
            f"Waste: {waste_pct(waste)}",
        ],
    )


def _wall_surface_line(surface: WallSurface, finish: FinishType, assignment: WallSurfaceAssignment,
                       resolver: GeometryResolver) -> TakeoffLine:
    grid = surface.grid_line
    resolver.offset(grid.label, grid.axis)
    cross_axis = "Y" if grid.axis == "X" else "X"
    length = abs(resolver.offset(grid.span[1], cross_axis) - resolver.offset(grid.span[0], cross_axis))
    height = resolver.level(surface.level_end).elevation - resolver.level(surface.level_start).elevation
    if height <= 0:
        height = resolver.storey_height(surface.level_start, config.DEFAULT_STOREY_HEIGHT_M)
    sides = 2 if assignment.side == "both" else 1
    waste = finish.assumptions.waste_percent
    gross = length * height
    qty = gross * sides * (1 + waste)
    formula = f"{fmt_num(length)} m × {fmt_num(height)} m × {sides} side(s) = {fmt_num(gross * sides, 2)} m²"
    if waste:
        formula += f" × (1 + {fmt_num(waste)}) = {fmt_num(qty, 2)} m²"
    return TakeoffLine(
        id=f"tof_wall_{assignment.id}",
        source_element_id=surface.id,
        trade=Trade.FINISHES,
        resource_key=f"finish-{finish.id}",
        quantity=round_quantity(qty, finish.assumptions.rounding),
        unit=finish.unit,
        formula_text=formula,
        inputs_snapshot={"length": length, "height": height, "sides": sides, "waste": waste},
        assumptions=[f"{finish.finish_name} on {surface.name}", f"Waste: {waste_pct(waste)}"],
        classification=LineClassification(
            element_type="wall-surface",
            level=surface.level_start,
            space_name=surface.name,
            category=finish.category,
            extra=list(surface.tags),
        ),
        pay_item=finish.dpwh_item_number_raw,
    )
