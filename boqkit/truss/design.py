"""Truss design orchestration and its takeoff lines.

Usage::

    from boqkit.truss import calculate_truss_design, truss_takeoff_lines

    result = calculate_truss_design(project.truss_design)
    lines = truss_takeoff_lines(project.truss_design, result)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from boqkit.calculators.base import fmt_num, round_quantity
from boqkit.errors import TrussError
from boqkit.models.takeoff import LineClassification, TakeoffLine, Trade
from boqkit.models.truss import TrussDesign, TrussParameters
from boqkit.roofing.mappings import BOLT_WEIGHT_KG, roofing_item
from boqkit.truss.framing import FramingResult, calculate_roof_framing
from boqkit.truss.synthesizer import (
    TrussResult,
    TrussTotals,
    generate_truss,
    total_truss_quantities,
    truss_quantity,
)

logger = logging.getLogger(__name__)


class DesignQuantity(BaseModel):
    truss_count: int
    total_truss_weight_kg: float
    total_plate_weight_kg: float
    total_purlin_weight_kg: float = 0.0
    total_bracing_weight_kg: float = 0.0


class TrussDesignResult(BaseModel):
    truss: TrussResult
    totals: TrussTotals
    framing: FramingResult | None = None
    quantity: DesignQuantity
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def validate_truss_parameters(params: TrussParameters) -> list[str]:
    """Return every problem with *params* (empty when all are acceptable)."""
    errors: list[str] = []
    if params.span_mm <= 0:
        errors.append("Span must be positive")
    if params.span_mm < 3000 or params.span_mm > 30000:
        errors.append("Span should be between 3m and 30m for practical trusses")
    if params.middle_rise_mm <= 0:
        errors.append("Rise must be positive")
    if params.spacing_mm <= 0 or params.spacing_mm > 3000:
        errors.append("Truss spacing should be between 0 and 3000mm")
    if params.top_chord_material.weight_kg_per_m <= 0:
        errors.append("Top chord weight per meter must be positive")
    if params.bottom_chord_material.weight_kg_per_m <= 0:
        errors.append("Bottom chord weight per meter must be positive")
    if params.web_material.weight_kg_per_m <= 0:
        errors.append("Web material weight per meter must be positive")
    return errors


def calculate_truss_design(design: TrussDesign) -> TrussDesignResult:
    """Generate the truss, scale it along the building and lay out framing."""
    params = design.truss_params
    problems: list[str] = []
    if design.building_length_mm <= 0:
        problems.append("Building length must be positive")
    if params.span_mm <= 0:
        problems.append("Truss span must be positive")
    if params.spacing_mm <= 0:
        problems.append("Truss spacing must be positive")
    if problems:
        raise TrussError("; ".join(problems))

    try:
        truss = generate_truss(params)
    except TrussError as exc:
        raise TrussError(f"Truss generation failed: {exc}") from exc

    warnings = list(truss.validation.warnings)
    count = truss_quantity(design.building_length_mm, params.spacing_mm)
    totals = total_truss_quantities(truss, count)

    framing: FramingResult | None = None
    if design.framing_params is not None:
        try:
            framing = calculate_roof_framing(params, design.building_length_mm, count, design.framing_params)
            warnings.extend(framing.warnings)
        except TrussError as exc:
            warnings.append(f"Framing calculation warning: {exc}")

    logger.info("Truss design: %d %s trusses, %.2f kg", count, params.type, totals.total_weight_kg)
    return TrussDesignResult(
        truss=truss,
        totals=totals,
        framing=framing,
        quantity=DesignQuantity(
            truss_count=count,
            total_truss_weight_kg=totals.members_weight_kg,
            total_plate_weight_kg=totals.plates_weight_kg,
            total_purlin_weight_kg=(framing.purlins.total_weight_kg + framing.eave_girt.weight_kg) if framing else 0.0,
            total_bracing_weight_kg=framing.bracing.total_weight_kg if framing else 0.0,
        ),
        warnings=warnings,
    )


def truss_takeoff_lines(design: TrussDesign, result: TrussDesignResult) -> list[TakeoffLine]:
    """Structural-steel (and ridge-roll) takeoff lines for a truss design."""
    overrides = design.dpwh_item_mappings
    kind = design.truss_params.type
    count = result.quantity.truss_count
    lines: list[TakeoffLine] = []

    def add(component: str, suffix: str, trade: Trade, resource: str, quantity: float,
            unit: str, formula: str, inputs: dict, assumptions: list[str]) -> None:
        lines.append(
            TakeoffLine(
                id=f"tof_truss_{suffix}",
                source_element_id="truss-design",
                trade=trade,
                resource_key=resource,
                quantity=quantity,
                unit=unit,
                formula_text=formula,
                inputs_snapshot=inputs,
                assumptions=assumptions,
                classification=LineClassification(element_type="truss", subtype=kind, category=component),
                pay_item=roofing_item(component, overrides),
            )
        )

    single = result.truss.weights.members_kg
    add(
        "truss_steel", "steel", Trade.STRUCTURAL_STEEL, f"steel-truss-{kind}",
        round_quantity(result.quantity.total_truss_weight_kg, 2), "kg",
        f"{count} trusses × {fmt_num(single, 2)} kg",
        {"truss_count": count, "single_truss_kg": single, "span_mm": design.truss_params.span_mm},
        [f"Spacing: {fmt_num(design.truss_params.spacing_mm)}mm",
         f"Building length: {fmt_num(design.building_length_mm)}mm"],
    )
    plates = result.truss.weights.plates_kg
    add(
        "steel_plates", "plates", Trade.STRUCTURAL_STEEL, "steel-plate",
        round_quantity(result.quantity.total_plate_weight_kg, 2), "kg",
        f"{count} trusses × {fmt_num(plates, 3)} kg plates",
        {"truss_count": count, "plates_per_truss": len(result.truss.plates)},
        [f"Plate thickness: {design.truss_params.plate_thickness}"],
    )

    framing = result.framing
    if framing is not None:
        add(
            "purlin_steel", "purlins", Trade.STRUCTURAL_STEEL, "steel-purlin",
            round_quantity(result.quantity.total_purlin_weight_kg, 2), "kg",
            f"{framing.purlins.rows} rows × {fmt_num(design.building_length_mm / 1000)} m"
            + (" + eave girts" if framing.eave_girt.length_m else ""),
            {"rows": framing.purlins.rows, "spacing_mm": framing.purlins.spacing_mm},
            [f"Section: {framing.purlins.section}"] if framing.purlins.section else [],
        )
        add(
            "bracing_steel", "bracing", Trade.STRUCTURAL_STEEL, "steel-bracing",
            float(framing.bracing.pieces), "Each",
            f"{framing.bracing.bays} bays × {framing.bracing.pieces // framing.bracing.bays} pieces",
            {"bays": framing.bracing.bays, "type": framing.bracing.type,
             "weight_kg": framing.bracing.total_weight_kg},
            [f"Bracing: {framing.bracing.type}"],
        )
        add(
            "bolts_and_rods", "bolts", Trade.STRUCTURAL_STEEL, "steel-bolts",
            round_quantity(framing.bolts.weight_kg, 2), "kg",
            f"{framing.bolts.count} bolts × {fmt_num(BOLT_WEIGHT_KG)} kg",
            {"bolt_count": framing.bolts.count},
            [],
        )
        if framing.ridge_cap.length_m:
            add(
                "ridge_cap", "ridgecap", Trade.ROOFING, "roof-ridge-roll",
                round_quantity(framing.ridge_cap.length_m, 2), "m",
                f"Ridge length = {fmt_num(framing.ridge_cap.length_m)} m",
                {"length_m": framing.ridge_cap.length_m},
                [],
            )
    return lines
