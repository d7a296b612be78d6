"""Roof covering takeoff: plan area, slope factor and covered area per roof plane."""

from __future__ import annotations

import logging
import math
from typing import Any

from pydantic import BaseModel, Field

from boqkit.calculators.base import fmt_num, round_quantity, waste_pct
from boqkit.errors import BoqKitError, CalculationError
from boqkit.geometry.resolver import GeometryResolver
from boqkit.models.project import ProjectSnapshot, RoofPlane, RoofPlaneGeometry, RoofSlope, RoofType
from boqkit.models.takeoff import LineClassification, TakeoffLine, Trade

logger = logging.getLogger(__name__)


class RoofingResult(BaseModel):
    takeoff_lines: list[TakeoffLine] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)


def slope_factor(slope: RoofSlope) -> float:
    """Ratio of sloped to plan area: ``1/cos(θ)`` or ``sqrt(1 + r²)``."""
    if slope.mode == "degrees":
        if not 0 <= slope.value < 90:
            raise CalculationError(f"Roof slope must be between 0 and 90 degrees, got {slope.value:g}")
        return 1 / math.cos(math.radians(slope.value))
    if slope.value < 0:
        raise CalculationError(f"Roof slope ratio cannot be negative, got {slope.value:g}")
    return math.sqrt(1 + slope.value ** 2)


def roof_plane_geometry(plane: RoofPlane, resolver: GeometryResolver) -> RoofPlaneGeometry:
    """Recompute plan area, slope factor and slope area from the boundary."""
    plan, _ = resolver.boundary_metrics(plane.boundary)
    factor = slope_factor(plane.slope)
    return RoofPlaneGeometry(plan_area_m2=plan, slope_factor=factor, slope_area_m2=plan * factor)


def roof_cover_takeoff(plane: RoofPlane, roof_type: RoofType) -> TakeoffLine:
    """Covering quantity = basis area × (1 + lap) × (1 + waste)."""
    geom = plane.computed
    use_slope = roof_type.area_basis == "slopeArea"
    basis = geom.slope_area_m2 if use_slope else geom.plan_area_m2
    lap = roof_type.lap_allowance_percent
    waste = roof_type.waste_percent
    qty = basis * (1 + lap) * (1 + waste)
    basis_name = "Slope area" if use_slope else "Plan area"
    return TakeoffLine(
        id=f"tof_roof_{plane.id}",
        source_element_id=plane.id,
        trade=Trade.ROOFING,
        resource_key=f"roof-{roof_type.id}",
        quantity=round_quantity(qty, 2),
        unit=roof_type.unit,
        formula_text=(
            f"{basis_name} {fmt_num(basis, 3)} m² × (1 + {fmt_num(lap)}) × (1 + {fmt_num(waste)}) "
            f"= {fmt_num(qty, 2)} m²"
        ),
        inputs_snapshot={
            "plan_area": geom.plan_area_m2,
            "slope_factor": geom.slope_factor,
            "slope_area": geom.slope_area_m2,
            "slope_mode": plane.slope.mode,
            "slope_value": plane.slope.value,
            "lap": lap,
            "waste": waste,
        },
        assumptions=[
            f"Roof type: {roof_type.name}",
            f"Area basis: {roof_type.area_basis}",
            f"Lap allowance: {waste_pct(lap)}",
            f"Waste: {waste_pct(waste)}",
        ],
        classification=LineClassification(
            element_type="roof",
            level=plane.level_id,
            roof_plane=plane.name,
            extra=list(plane.tags),
        ),
        pay_item=roof_type.dpwh_item_number_raw,
    )


def calculate_roofing(project: ProjectSnapshot, resolver: GeometryResolver | None = None) -> RoofingResult:
    """Takeoff lines for every roof plane.

    Each plane's ``computed`` geometry is rewritten from its boundary.
    """
    planes = project.roof_planes
    if not planes:
        return RoofingResult(summary={"total_roof_area": 0.0, "roof_plane_count": 0, "roof_line_count": 0})
    if not project.roof_types:
        return RoofingResult(
            errors=["No roof types defined"],
            summary={"total_roof_area": 0.0, "roof_plane_count": len(planes), "roof_line_count": 0},
        )

    resolver = resolver or GeometryResolver(project.grid_x, project.grid_y, project.levels)
    roof_types = {rt.id: rt for rt in project.roof_types}
    lines: list[TakeoffLine] = []
    errors: list[str] = []
    total = 0.0

    for plane in planes:
        roof_type = roof_types.get(plane.roof_type_id)
        if roof_type is None:
            errors.append(f'Roof plane "{plane.name}": roof type not found ({plane.roof_type_id})')
            continue
        try:
            plane.computed = roof_plane_geometry(plane, resolver)
            line = roof_cover_takeoff(plane, roof_type)
        except BoqKitError as exc:
            errors.append(f'Roof plane "{plane.name}": {exc}')
            continue
        total += plane.computed.slope_area_m2
        lines.append(line)

    return RoofingResult(
        takeoff_lines=lines,
        errors=errors,
        summary={
            "total_roof_area": round_quantity(total, 2),
            "roof_plane_count": len(planes),
            "roof_line_count": len(lines),
        },
    )
