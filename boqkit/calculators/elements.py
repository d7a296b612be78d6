"""Per-kind element calculators and their registry.

Each calculator turns one ElementInstance and its template into the
instance's concrete, rebar and formwork TakeoffLines.  Failures raise;
the TakeoffEngine records them against the instance.
"""

from __future__ import annotations

import abc
import logging
from typing import Any

from boqkit.calculators import concrete, formwork, rebar
from boqkit.calculators.base import QuantityResult, fmt_num, round_quantity, waste_pct
from boqkit.errors import CalculationError, GeometryError
from boqkit.geometry.resolver import GeometryResolver
from boqkit.models.project import (
    BeamTemplate,
    CircularSection,
    ColumnTemplate,
    ElementInstance,
    FoundationTemplate,
    IsolatedFooting,
    ProjectSettings,
    RebarConfig,
    SlabTemplate,
)
from boqkit.models.takeoff import LineClassification, RebarRole, TakeoffLine, Trade

logger = logging.getLogger(__name__)


class CalcContext:
    """Geometry and settings shared by every calculator in one run."""

    def __init__(self, resolver: GeometryResolver, settings: ProjectSettings) -> None:
        self.resolver = resolver
        self.settings = settings


class ElementCalculator(abc.ABC):
    """Base class for element calculators."""

    @property
    @abc.abstractmethod
    def kind(self) -> str:
        """Template kind handled ('beam', 'slab', ...)."""

    @abc.abstractmethod
    def calculate(self, instance: ElementInstance, template: Any, ctx: CalcContext) -> list[TakeoffLine]:
        """Return the takeoff lines for *instance*."""

    # ------------------------------------------------------------------
    # Line builders
    # ------------------------------------------------------------------

    def _classification(self, instance: ElementInstance, template: Any,
                        subtype: str | None = None,
                        rebar_role: RebarRole | None = None) -> LineClassification:
        return LineClassification(
            element_type=self.kind,
            subtype=subtype,
            template_id=template.id,
            template=template.name,
            level=instance.placement.level_id,
            rebar_role=rebar_role,
            extra=list(instance.tags),
        )

    def _concrete_line(self, instance: ElementInstance, template: Any, ctx: CalcContext,
                       result: QuantityResult, subtype: str | None = None,
                       extra_assumptions: list[str] | None = None) -> TakeoffLine:
        decimals = ctx.settings.rounding.concrete
        assumptions = [f"Waste: {waste_pct(result.inputs.get('waste', 0.0))}"]
        if template.dpwh_item_number:
            assumptions.append(f"DPWH Item: {template.dpwh_item_number}")
        assumptions.extend(extra_assumptions or [])
        return TakeoffLine(
            id=f"tof_{instance.id}_concrete",
            source_element_id=instance.id,
            trade=Trade.CONCRETE,
            resource_key="concrete-class-a",
            quantity=round_quantity(result.value, decimals),
            unit="m³",
            formula_text=result.formula_text,
            inputs_snapshot=result.inputs,
            assumptions=assumptions,
            classification=self._classification(instance, template, subtype),
            pay_item=template.dpwh_item_number,
        )

    def _rebar_line(self, instance: ElementInstance, template: Any, ctx: CalcContext,
                    role: RebarRole, result: QuantityResult, diameter: int, pay_item: str,
                    subtype: str | None = None) -> TakeoffLine:
        decimals = ctx.settings.rounding.rebar
        assumptions: list[str] = []
        if "lap" in result.inputs:
            assumptions.append(f"Lap: {fmt_num(result.inputs['lap'])}m")
        assumptions += [
            f"Grade: {rebar.bar_grade(diameter)}",
            f"Waste: {waste_pct(result.inputs.get('waste', 0.0))}",
            f"DPWH Item: {pay_item}",
        ]
        return TakeoffLine(
            id=f"tof_{instance.id}_rebar_{role}",
            source_element_id=instance.id,
            trade=Trade.REBAR,
            resource_key=f"rebar-{diameter}mm",
            quantity=round_quantity(result.value, decimals),
            unit="kg",
            formula_text=result.formula_text,
            inputs_snapshot=result.inputs,
            assumptions=assumptions,
            classification=self._classification(instance, template, subtype, role),
            pay_item=pay_item,
        )

    def _formwork_line(self, instance: ElementInstance, template: Any, ctx: CalcContext,
                       result: QuantityResult, resource: str, note: str,
                       subtype: str | None = None) -> TakeoffLine:
        return TakeoffLine(
            id=f"tof_{instance.id}_formwork",
            source_element_id=instance.id,
            trade=Trade.FORMWORK,
            resource_key=f"formwork-{resource}",
            quantity=round_quantity(result.value, ctx.settings.rounding.formwork),
            unit="m²",
            formula_text=result.formula_text,
            inputs_snapshot=result.inputs,
            assumptions=[note],
            classification=self._classification(instance, template, subtype),
        )

    @staticmethod
    def _main_item(config: RebarConfig, diameter: int) -> str:
        return config.dpwh_rebar_item or rebar.dpwh_item_for(diameter, config.epoxy_coated)

    @staticmethod
    def _lookup_item(config: RebarConfig, diameter: int) -> str:
        return rebar.dpwh_item_for(diameter, config.epoxy_coated)


def _plan_spans(instance: ElementInstance, resolver: GeometryResolver, label: str) -> tuple[float, float]:
    refs = instance.placement.grid_ref
    if len(refs) < 2 or "-" not in refs[0] or "-" not in refs[1]:
        raise GeometryError(f"{label} requires X and Y grid spans, got {refs}")
    return resolver.span(refs[0], "X"), resolver.span(refs[1], "Y")


# ---------------------------------------------------------------------------
# Beam
# ---------------------------------------------------------------------------


class BeamCalculator(ElementCalculator):
    """Beams span along X (``["A-B", "1"]``) or along Y (``["A", "1-2"]``)."""

    kind = "beam"

    def calculate(self, instance: ElementInstance, template: BeamTemplate, ctx: CalcContext) -> list[TakeoffLine]:
        if template.width <= 0 or template.height <= 0:
            raise CalculationError(
                f"Beam template '{template.name}' has invalid dimensions "
                f"(width: {fmt_num(template.width)}, height: {fmt_num(template.height)})"
            )
        length = self._length(instance, ctx.resolver)
        waste = ctx.settings.waste

        lines = [
            self._concrete_line(
                instance, template, ctx,
                concrete.beam_volume(template.width, template.height, length, waste.concrete),
            )
        ]

        cfg = template.rebar_config
        if cfg is not None:
            if cfg.main_bars is not None:
                if cfg.main_bars.count is None:
                    raise CalculationError("Beam main bars require a bar count")
                d = cfg.main_bars.diameter
                res = rebar.main_bars_weight(d, cfg.main_bars.count, length, waste.rebar)
                lines.append(self._rebar_line(instance, template, ctx, "main", res, d, self._main_item(cfg, d)))
            if cfg.stirrups is not None:
                d = cfg.stirrups.diameter
                res = rebar.stirrups_weight(
                    d, cfg.stirrups.spacing, length, template.width, template.height, waste.rebar
                )
                lines.append(self._rebar_line(instance, template, ctx, "stirrups", res, d, self._lookup_item(cfg, d)))

        lines.append(
            self._formwork_line(
                instance, template, ctx,
                formwork.beam_formwork(template.width, template.height, length),
                "beam", "Contact area: bottom + 2 sides",
            )
        )
        return lines

    @staticmethod
    def _length(instance: ElementInstance, resolver: GeometryResolver) -> float:
        refs = instance.placement.grid_ref
        length = 0.0
        if refs and "-" in refs[0]:
            length = resolver.span(refs[0], "X")
        elif len(refs) > 1 and "-" in refs[1]:
            length = resolver.span(refs[1], "Y")
        if length <= 0:
            raise GeometryError(f"Could not determine beam length from grid reference {refs}")
        return length


# ---------------------------------------------------------------------------
# Slab
# ---------------------------------------------------------------------------


class SlabCalculator(ElementCalculator):
    """Slabs cover a grid rectangle (``["A-B", "1-2"]``).

    Main bars run along X and are distributed across Y; secondary bars
    run along Y across X.
    """

    kind = "slab"

    def calculate(self, instance: ElementInstance, template: SlabTemplate, ctx: CalcContext) -> list[TakeoffLine]:
        if template.thickness <= 0:
            raise CalculationError(
                f"Slab template '{template.name}' has invalid thickness ({fmt_num(template.thickness)})"
            )
        x_len, y_len = _plan_spans(instance, ctx.resolver, "Slab")
        area = x_len * y_len
        waste = ctx.settings.waste

        lines = [
            self._concrete_line(
                instance, template, ctx,
                concrete.slab_volume(template.thickness, area, waste.concrete),
            )
        ]

        cfg = template.rebar_config
        if cfg is not None:
            if cfg.main_bars is not None:
                d = cfg.main_bars.diameter
                res = rebar.distributed_bars_weight(
                    d, x_len, spacing=cfg.main_bars.spacing, distribution=y_len,
                    count=cfg.main_bars.count, waste=waste.rebar,
                )
                lines.append(self._rebar_line(instance, template, ctx, "main", res, d, self._main_item(cfg, d)))
            if cfg.secondary_bars is not None:
                d = cfg.secondary_bars.diameter
                res = rebar.distributed_bars_weight(
                    d, y_len, spacing=cfg.secondary_bars.spacing, distribution=x_len, waste=waste.rebar,
                )
                lines.append(self._rebar_line(instance, template, ctx, "secondary", res, d, self._lookup_item(cfg, d)))

        lines.append(
            self._formwork_line(
                instance, template, ctx,
                formwork.slab_formwork(area),
                "slab", "Soffit formwork (bottom surface)",
            )
        )
        return lines


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class ColumnCalculator(ElementCalculator):
    """Columns run from their level to the explicit end level or the next level up."""

    kind = "column"

    def calculate(self, instance: ElementInstance, template: ColumnTemplate, ctx: CalcContext) -> list[TakeoffLine]:
        placement = instance.placement
        levels = ctx.resolver.column_levels(placement.level_id, placement.end_level_id)
        if levels is None:
            raise GeometryError(
                f"Column at level '{placement.level_id}' skipped - no level above (top floor column)"
            )
        start, end = levels
        height = end.elevation - start.elevation
        section = template.section
        circular = isinstance(section, CircularSection)
        subtype = "circular" if circular else "rectangular"
        if not circular and (section.width <= 0 or section.height <= 0):
            raise CalculationError(
                f"Column template '{template.name}' has invalid dimensions "
                f"(width: {fmt_num(section.width)}, height: {fmt_num(section.height)})"
            )
        waste = ctx.settings.waste
        height_note = f"Height: {start.label} to {end.label} ({height:.2f}m)"

        lines = [
            self._concrete_line(
                instance, template, ctx,
                concrete.column_volume(section, height, waste.concrete),
                subtype=subtype,
                extra_assumptions=[height_note],
            )
        ]

        cfg = template.rebar_config
        if cfg is not None:
            if cfg.main_bars is not None:
                if cfg.main_bars.count is None:
                    raise CalculationError("Column main bars require a bar count")
                d = cfg.main_bars.diameter
                res = rebar.main_bars_weight(d, cfg.main_bars.count, height, waste.rebar)
                lines.append(
                    self._rebar_line(instance, template, ctx, "main", res, d, self._main_item(cfg, d), subtype)
                )
            if cfg.stirrups is not None:
                d = cfg.stirrups.diameter
                if circular:
                    res = rebar.hoops_weight(d, cfg.stirrups.spacing, height, section.diameter, waste.rebar)
                else:
                    res = rebar.stirrups_weight(
                        d, cfg.stirrups.spacing, height, section.width, section.height, waste.rebar
                    )
                lines.append(
                    self._rebar_line(instance, template, ctx, "ties", res, d, self._lookup_item(cfg, d), subtype)
                )

        if circular:
            fw = formwork.column_formwork(height, diameter=section.diameter)
            note = "Cylindrical surface"
        else:
            fw = formwork.column_formwork(height, width=section.width, depth=section.height)
            note = "All 4 sides"
        lines.append(self._formwork_line(instance, template, ctx, fw, "column", note, subtype))
        return lines


# ---------------------------------------------------------------------------
# Foundation
# ---------------------------------------------------------------------------


class FoundationCalculator(ElementCalculator):
    """Mat foundations cover a grid rectangle; isolated footings carry their own size."""

    kind = "foundation"

    def calculate(self, instance: ElementInstance, template: FoundationTemplate, ctx: CalcContext) -> list[TakeoffLine]:
        footing = template.footing
        waste = ctx.settings.waste

        if isinstance(footing, IsolatedFooting):
            subtype = "footing"
            if min(footing.length, footing.width, footing.depth) <= 0:
                raise CalculationError(
                    f"Footing template '{template.name}' has invalid dimensions "
                    f"(length: {fmt_num(footing.length)}, width: {fmt_num(footing.width)}, "
                    f"depth: {fmt_num(footing.depth)})"
                )
            span_main, span_secondary = footing.length, footing.width
            volume = concrete.footing_volume(footing.length, footing.width, footing.depth, waste.concrete)
            fw = formwork.footing_formwork(footing.length, footing.width, footing.depth)
            resource, note = "footing", "All 4 vertical sides (bottom in contact with soil)"
        else:
            subtype = "mat"
            if footing.thickness <= 0:
                raise CalculationError(
                    f"Mat template '{template.name}' has invalid thickness ({fmt_num(footing.thickness)})"
                )
            span_main, span_secondary = _plan_spans(instance, ctx.resolver, "Mat foundation")
            volume = concrete.mat_volume(footing.thickness, span_main * span_secondary, waste.concrete)
            fw = formwork.mat_formwork(span_main, span_secondary, footing.thickness)
            resource, note = "mat", "Perimeter edge formwork only (bottom in contact with soil)"

        lines = [self._concrete_line(instance, template, ctx, volume, subtype=subtype)]

        cfg = template.rebar_config
        if cfg is not None:
            if cfg.main_bars is not None:
                d = cfg.main_bars.diameter
                res = rebar.distributed_bars_weight(
                    d, span_main, spacing=cfg.main_bars.spacing, distribution=span_secondary,
                    count=cfg.main_bars.count, waste=waste.rebar,
                )
                lines.append(
                    self._rebar_line(instance, template, ctx, "main", res, d, self._main_item(cfg, d), subtype)
                )
            if cfg.secondary_bars is not None:
                d = cfg.secondary_bars.diameter
                res = rebar.distributed_bars_weight(
                    d, span_secondary, spacing=cfg.secondary_bars.spacing, distribution=span_main,
                    waste=waste.rebar,
                )
                lines.append(
                    self._rebar_line(instance, template, ctx, "secondary", res, d, self._main_item(cfg, d), subtype)
                )

        lines.append(self._formwork_line(instance, template, ctx, fw, resource, note, subtype))
        return lines


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_CALCULATORS: dict[str, ElementCalculator] = {
    calc.kind: calc
    for calc in (BeamCalculator(), SlabCalculator(), ColumnCalculator(), FoundationCalculator())
}


def calculator_for(kind: str) -> ElementCalculator:
    try:
        return _CALCULATORS[kind]
    except KeyError:
        raise CalculationError(f"No calculator registered for element kind '{kind}'") from None


def register_calculator(calculator: ElementCalculator) -> None:
    """Add or replace the calculator for ``calculator.kind``."""
    _CALCULATORS[calculator.kind] = calculator
    logger.info("Registered element calculator: %s", calculator.kind)
