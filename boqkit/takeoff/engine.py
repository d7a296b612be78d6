"""TakeoffEngine: runs every calculator over a project snapshot.

Usage::

    from boqkit.takeoff import TakeoffEngine

    report = TakeoffEngine().generate_takeoff(project)
    report.summary["total_concrete"]
"""

from __future__ import annotations

import logging
from typing import Any

from boqkit.calculators.base import round_quantity
from boqkit.calculators.elements import CalcContext, calculator_for
from boqkit.errors import BoqKitError, TrussError
from boqkit.finishes.calculator import calculate_finishes
from boqkit.geometry.resolver import GeometryResolver
from boqkit.models.project import ProjectSnapshot
from boqkit.models.takeoff import TakeoffLine, Trade
from boqkit.roofing.calculator import calculate_roofing
from boqkit.schedule.calculator import calculate_schedule_items
from boqkit.takeoff.report import TakeoffReport
from boqkit.truss.design import calculate_truss_design, truss_takeoff_lines

logger = logging.getLogger(__name__)


class TakeoffEngine:
    """Aggregate element, finishes, roofing, truss and schedule takeoffs.

    Instances that fail are skipped and recorded in ``errors``; nothing
    short of an invalid snapshot aborts the run.
    """

    def generate_takeoff(self, project: ProjectSnapshot | dict[str, Any]) -> TakeoffReport:
        if not isinstance(project, ProjectSnapshot):
            project = ProjectSnapshot.model_validate(project)

        resolver = GeometryResolver(project.grid_x, project.grid_y, project.levels)
        ctx = CalcContext(resolver, project.settings)
        lines: list[TakeoffLine] = []
        errors: list[str] = []
        warnings: list[str] = []

        lines.extend(self._element_lines(project, ctx, errors))

        finishes = calculate_finishes(project, resolver)
        lines.extend(finishes.takeoff_lines)
        errors.extend(finishes.errors)

        roofing = calculate_roofing(project, resolver)
        lines.extend(roofing.takeoff_lines)
        errors.extend(roofing.errors)

        total_truss_steel = 0.0
        if project.truss_design is not None:
            try:
                design = calculate_truss_design(project.truss_design)
            except TrussError as exc:
                errors.append(f"Truss design: {exc}")
            else:
                warnings.extend(design.warnings)
                truss_lines = truss_takeoff_lines(project.truss_design, design)
                lines.extend(truss_lines)
                total_truss_steel = sum(
                    ln.quantity for ln in truss_lines
                    if ln.trade == Trade.STRUCTURAL_STEEL and ln.unit == "kg"
                )

        schedule = calculate_schedule_items(project)
        lines.extend(schedule.takeoff_lines)
        errors.extend(schedule.errors)

        rounding = project.settings.rounding
        summary = {
            "total_concrete": round_quantity(self._sum(lines, Trade.CONCRETE), rounding.concrete),
            "total_rebar": round_quantity(self._sum(lines, Trade.REBAR), rounding.rebar),
            "total_formwork": round_quantity(self._sum(lines, Trade.FORMWORK), rounding.formwork),
            "total_floor_area": finishes.summary["total_floor_area"],
            "total_wall_area": finishes.summary["total_wall_area"],
            "total_ceiling_area": finishes.summary["total_ceiling_area"],
            "total_roof_area": roofing.summary["total_roof_area"],
            "total_truss_steel": round_quantity(total_truss_steel, 2),
            "element_count": len(project.element_instances),
            "space_count": len(project.spaces),
            "roof_plane_count": len(project.roof_planes),
            "schedule_item_count": len(project.schedule_items),
            "takeoff_line_count": len(lines),
            "boq_line_count": 0,
        }

        logger.info(
            "Takeoff for project %s: %d lines, %d errors",
            project.id or "<unnamed>", len(lines), len(errors),
        )
        return TakeoffReport(
            takeoff_lines=lines,
            summary=summary,
            errors=errors,
            warnings=warnings,
            project_id=project.id,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _element_lines(project: ProjectSnapshot, ctx: CalcContext, errors: list[str]) -> list[TakeoffLine]:
        lines: list[TakeoffLine] = []
        for instance in project.element_instances:
            template = project.template(instance.template_id)
            if template is None:
                errors.append(f"Instance {instance.id}: template '{instance.template_id}' not found")
                continue
            if not ctx.resolver.has_level(instance.placement.level_id):
                errors.append(f"Instance {instance.id}: level '{instance.placement.level_id}' not found")
                continue
            try:
                produced = calculator_for(template.kind).calculate(instance, template, ctx)
            except BoqKitError as exc:
                errors.append(f"Instance {instance.id}: {exc}")
                logger.debug("Skipped instance %s: %s", instance.id, exc)
                continue
            lines.extend(produced)
        return lines

    @staticmethod
    def _sum(lines: list[TakeoffLine], trade: Trade) -> float:
        return sum(ln.quantity for ln in lines if ln.trade == trade)
